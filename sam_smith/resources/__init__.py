"""
Resource definitions for SAM template generation and mutation.
Each resource type has its template snippet and required parameters.

Snippets are written at their final indentation so they can be parsed
straight into the document tree.
"""

# Template header
TEMPLATE_HEADER = """
AWSTemplateFormatVersion: '2010-09-09'
Transform: AWS::Serverless-2016-10-31
Description: SAM template for {project_name} generated by sam-smith
"""

# Environment variable wiring
ENV_PARAMETER = """
  Env{name}:
    Type: String
    Default: {value}
"""

SSM_PARAMETER = """
  Param{name}:
    Type: AWS::SSM::Parameter
    Properties:
      Name: !Sub '/{ssm_prefix}/{environment}/{project_name}/{name}'
      Type: String
      Value: !Ref Env{name}
"""

ENVIRONMENT_BLOCK = """
      Environment:
        Variables:
{variables}
"""

ENVIRONMENT_VARIABLE = "          {name}: !Ref Env{name}"

# Lambda Function Template
LAMBDA_FUNCTION = """
  {function_name}:
    Type: AWS::Serverless::Function
    Properties:
      FunctionName: !Sub ${{AWS::StackName}}-{function_name}
      CodeUri: src/
      Handler: {handler}
      Runtime: {runtime}
      Timeout: {timeout}
      Architectures:
        - {architecture}
    Metadata:
      BuildMethod: esbuild
      BuildProperties:
        Minify: false
        Target: es2020
        Sourcemap: true
        EntryPoints:
          - {entry_point}
        External:
          - aws-sdk
"""

LAMBDA_LOG_GROUP = """
  {function_name}LogGroup:
    Type: AWS::Logs::LogGroup
    Properties:
      LogGroupName: !Sub '/aws/lambda/${{{function_name}}}'
      RetentionInDays: 7
"""

# API Gateway Template
API_GATEWAY = """
  {api_name}:
    Type: AWS::Serverless::Api
    Properties:
      Name: !Sub ${{AWS::StackName}}-{api_name}
      StageName: default
      Cors:
        AllowOrigin: "'*'"
        AllowHeaders: "'Content-Type,Authorization'"
        AllowMethods: "'GET,POST,PUT,DELETE,OPTIONS'"
"""

API_URL_OUTPUT = """
  {api_name}Url:
    Description: "API Gateway endpoint URL"
    Value: !Sub "https://${{{api_name}}}.execute-api.${{AWS::Region}}.amazonaws.com/default/"
"""

API_EVENT = """
        {event_name}:
          Type: Api
          Properties:
            RestApiId: !Ref {api_name}
            Path: {path}
            Method: {method}
"""

EVENTS_BLOCK = """
      Events:
"""

# Authentication
BASIC_AUTHORIZER_NAME = "BasicAuthorizerFunction"
BASIC_AUTHORIZER_HANDLER = "authorizer/authorizer.basicAuthorizer"
BASIC_AUTHORIZER_ENTRY_POINT = "authorizer/authorizer.ts"
BASIC_AUTHORIZER_TIMEOUT = 60

BASIC_AUTH = """
      Auth:
        DefaultAuthorizer: BasicAuthorizer
        Authorizers:
          BasicAuthorizer:
            FunctionPayloadType: REQUEST
            FunctionArn: !GetAtt BasicAuthorizerFunction.Arn
            Identity:
              Headers:
                - Key
              ReauthorizeEvery: 0
"""

COGNITO_AUTH = """
      Auth:
        DefaultAuthorizer: CognitoAuthorizer
        Authorizers:
          CognitoAuthorizer:
            UserPoolArn: !GetAtt {pool_name}UserPool.Arn
"""

COGNITO_USER_POOL = """
  {pool_name}UserPool:
    Type: AWS::Cognito::UserPool
    Properties:
      UserPoolName: !Sub ${{AWS::StackName}}-{pool_name}UserPool
      AutoVerifiedAttributes:
        - email
      Policies:
        PasswordPolicy:
          MinimumLength: 8
          RequireLowercase: true
          RequireNumbers: true
          RequireSymbols: true
          RequireUppercase: true
"""

COGNITO_USER_POOL_CLIENT = """
  {pool_name}UserPoolClient:
    Type: AWS::Cognito::UserPoolClient
    Properties:
      ClientName: !Sub ${{AWS::StackName}}-{pool_name}UserPoolClient
      UserPoolId: !Ref {pool_name}UserPool
      GenerateSecret: false
      ExplicitAuthFlows:
        - ALLOW_USER_PASSWORD_AUTH
        - ALLOW_REFRESH_TOKEN_AUTH
        - ALLOW_USER_SRP_AUTH
"""

COGNITO_OUTPUTS = """
  {pool_name}UserPoolId:
    Description: "Cognito User Pool ID"
    Value: !Ref {pool_name}UserPool
  {pool_name}UserPoolClientId:
    Description: "Cognito User Pool Client ID"
    Value: !Ref {pool_name}UserPoolClient
"""

# Layer Template
LAYER_VERSION = """
  {layer_name}:
    Type: 'AWS::Serverless::LayerVersion'
    Properties:
      ContentUri: ./src/layers/{layer_name}
      CompatibleRuntimes:
        - {runtime}
"""

# DynamoDB Table Template
DYNAMODB_TABLE = """
  {table_name}:
    Type: 'AWS::DynamoDB::Table'
    DeletionPolicy: Retain
    Properties:
      TableName: !Sub ${{AWS::StackName}}-{table_name}
      AttributeDefinitions:
{attribute_definitions}
      KeySchema:
{key_schema}
      BillingMode: PAY_PER_REQUEST
"""

DYNAMODB_ATTRIBUTE = """        - AttributeName: {attribute}
          AttributeType: 'S'"""

DYNAMODB_KEY = """        - AttributeName: {attribute}
          KeyType: '{key_type}'"""

TABLE_POLICY = """
  {table_name}Policy:
    Type: AWS::IAM::ManagedPolicy
    Properties:
      ManagedPolicyName: !Sub ${{AWS::StackName}}-{table_name}Policy
      PolicyDocument:
        Version: '2012-10-17'
        Statement:
          - Effect: Allow
            Action:
              - dynamodb:Query
              - dynamodb:Scan
              - dynamodb:GetItem
              - dynamodb:PutItem
              - dynamodb:UpdateItem
              - dynamodb:DeleteItem
            Resource: !GetAtt {table_name}.Arn
"""

# SAM CLI deploy configuration
SAMCONFIG = """version = 0.1
[default]
[default.deploy]
[default.deploy.parameters]
stack_name = "{stack_name}"
s3_prefix = "{stack_name}"
region = "{region}"
confirm_changeset = true
capabilities = "CAPABILITY_IAM"
disable_rollback = false
image_repositories = []
resolve_s3 = true
"""
