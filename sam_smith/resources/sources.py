"""
TypeScript boilerplate for generated source files.

Every file sam-smith writes under src/ comes from one of these functions,
together with the import line used to wire a table helper into a handler.
"""

from typing import List


def capitalize(name: str) -> str:
    return name[:1].upper() + name[1:]


def table_query_function(table_name: str) -> str:
    """Name of the query helper exported by src/utils/<table>Handler.ts."""
    return f"try{capitalize(table_name)}Query"


def table_import_path(table_name: str) -> str:
    """Module path of a table helper as seen from src/<lambda>/handler.ts."""
    return f"../utils/{table_name}Handler"


def table_import(table_name: str) -> str:
    return f"import {{ {table_query_function(table_name)} }} from '{table_import_path(table_name)}';"


def initial_handler(function_name: str) -> str:
    """Handler for the project's first Lambda, which greets through src/utils."""
    return f'''import {{ APIGatewayProxyEvent, APIGatewayProxyResult }} from 'aws-lambda';
import {{ greet }} from '../utils/greet';
export const {function_name} = async (event: APIGatewayProxyEvent): Promise<APIGatewayProxyResult> => {{
    greet("{function_name}");
    return {{
        statusCode: 200,
        body: JSON.stringify({{
            message: "{function_name} world",
        }}),
    }};
}};
'''


def initial_handler_test(function_name: str) -> str:
    return f'''import {{ {function_name} }} from './handler.js';
import {{ APIGatewayProxyEvent }} from 'aws-lambda';
import {{ greet }} from '../utils/greet';

jest.mock('../utils/greet');

describe('Unit test for app handler', function () {{
    it('verifies successful response', async () => {{
        const event: APIGatewayProxyEvent = {{}} as any;
        const result = await {function_name}(event);

        expect(result.statusCode).toEqual(200);
        expect(result.body).toEqual(
            JSON.stringify({{
                message: '{function_name} world',
            }})
        );
        expect(greet).toHaveBeenCalled();
    }});
}});
'''


def lambda_handler(name: str) -> str:
    return f'''import {{ APIGatewayProxyEvent, APIGatewayProxyResult }} from 'aws-lambda';

export const {name} = async (event: APIGatewayProxyEvent): Promise<APIGatewayProxyResult> => {{
    return {{
        statusCode: 200,
        body: JSON.stringify({{
            message: "hello from {name}",
        }}),
    }};
}};
'''


def lambda_handler_test(name: str) -> str:
    return f'''import {{ {name} }} from './handler';
import {{ APIGatewayProxyEvent }} from 'aws-lambda';

describe('Unit test for {name} handler', function () {{
    it('verifies successful response', async () => {{
        const event: APIGatewayProxyEvent = {{}} as any;
        const result = await {name}(event);

        expect(result.statusCode).toEqual(200);
        expect(result.body).toEqual(
            JSON.stringify({{
                message: 'hello from {name}',
            }})
        );
    }});
}});
'''


GREET = '''export function greet(name: string): void {
    console.log(`hello world from ${name}`);
}
'''

GREET_TEST = '''import { greet } from './greet';

describe('greet', () => {
    it('should log "hello world from test"', () => {
        const consoleSpy = jest.spyOn(console, 'log');
        greet("test");
        expect(consoleSpy).toHaveBeenCalledWith('hello world from test');
        consoleSpy.mockRestore();
    });
});
'''

AUTHORIZER = '''import { APIGatewayRequestAuthorizerEvent, APIGatewayAuthorizerResult } from 'aws-lambda';

export const basicAuthorizer = async (event: APIGatewayRequestAuthorizerEvent): Promise<APIGatewayAuthorizerResult> => {
    const apiKey = event.headers?.['Key'] || event.headers?.['key'];
    const expectedApiKey = "TEST_API_KEY_123";

    const effect = apiKey === expectedApiKey ? 'Allow' : 'Deny';

    return {
        principalId: 'user',
        policyDocument: {
            Version: '2012-10-17',
            Statement: [
                {
                    Action: 'execute-api:Invoke',
                    Effect: effect,
                    Resource: event.methodArn,
                },
            ],
        },
    };
};
'''

AUTHORIZER_TEST = '''import { basicAuthorizer } from './authorizer';
import { APIGatewayRequestAuthorizerEvent } from 'aws-lambda';

describe('basicAuthorizer', () => {
    const mockEvent = (headers: { [key: string]: string }): APIGatewayRequestAuthorizerEvent => ({
        type: 'REQUEST',
        methodArn: 'arn:aws:execute-api:us-east-1:123456789012:api-id/default/GET/hello',
        resource: '/hello',
        path: '/hello',
        httpMethod: 'GET',
        headers: headers,
        multiValueHeaders: {},
        pathParameters: {},
        queryStringParameters: {},
        multiValueQueryStringParameters: {},
        stageVariables: {},
        requestContext: {} as any,
    });

    it('should allow request with correct Key', async () => {
        const result = await basicAuthorizer(mockEvent({ 'Key': 'TEST_API_KEY_123' }));
        expect(result.policyDocument.Statement[0].Effect).toBe('Allow');
    });

    it('should allow request with lowercase key header', async () => {
        const result = await basicAuthorizer(mockEvent({ 'key': 'TEST_API_KEY_123' }));
        expect(result.policyDocument.Statement[0].Effect).toBe('Allow');
    });

    it('should deny request with incorrect Key', async () => {
        const result = await basicAuthorizer(mockEvent({ 'Key': 'WRONG_KEY' }));
        expect(result.policyDocument.Statement[0].Effect).toBe('Deny');
    });

    it('should deny request with missing Key', async () => {
        const result = await basicAuthorizer(mockEvent({}));
        expect(result.policyDocument.Statement[0].Effect).toBe('Deny');
    });
});
'''


def layer_functions(layer_name: str) -> str:
    return f'''export function {layer_name}Function(): void {{
    console.log('hello world from {layer_name}');
}}
'''


def layer_functions_test(layer_name: str) -> str:
    return f'''import {{ {layer_name}Function }} from './{layer_name}Functions';

describe('{layer_name}Function', () => {{
    it('should log a greeting from {layer_name}', () => {{
        const consoleSpy = jest.spyOn(console, 'log');
        {layer_name}Function();
        expect(consoleSpy).toHaveBeenCalledWith('hello world from {layer_name}');
        consoleSpy.mockRestore();
    }});
}});
'''


def _props(keys: List[str], indent: int) -> str:
    pad = " " * indent
    return ",\n".join(f"{pad}{key}: '{key}'" for key in keys)


def _type_fields(keys: List[str]) -> str:
    return "\n".join(f"        {key}: string;" for key in keys)


def _unique(keys: List[str]) -> List[str]:
    seen = []
    for key in keys:
        if key not in seen:
            seen.append(key)
    return seen


def table_handler(table_name: str, full_table_name: str, partition_key: str, sort_key: str = "") -> str:
    """
    Query helper for a DynamoDB table built on dynamo-query-builder.

    Args:
        table_name: Logical table name in the template
        full_table_name: Deployed table name
        partition_key: '#'-separated partition key path, e.g. "a#b"
        sort_key: '#'-separated sort key path, empty for a simple key
    """
    pk_keys = partition_key.split("#")
    sk_keys = sort_key.split("#") if sort_key else []
    pk_names = ", ".join(f"'{key}'" for key in pk_keys)
    function_name = table_query_function(table_name)

    if sk_keys:
        sk_names = ", ".join(f"'{key}'" for key in sk_keys)
        sk_type = f'''
    type sk = {{
{_type_fields(sk_keys)}
    }};
'''
        sk_schema = f'''
        sk: {{
            name: '{sort_key}',
            keys: [{sk_names}],
            separator: '#',
        }},'''
        table_type = "Table<pk, sk, data>"
        key_args = f'''{{
{_props(pk_keys, 8)},
    }}, {{
{_props(sk_keys, 8)},
    }}'''
    else:
        sk_type = ""
        sk_schema = ""
        table_type = "Table<pk, never, data>"
        key_args = f'''{{
{_props(pk_keys, 8)},
    }}'''

    return f'''import {{ DynamoClient, KeySchema, Table }} from 'dynamo-query-builder';
const tableName = "{full_table_name}";
const client = new DynamoClient({{}});
export async function {function_name}() {{

    type pk = {{
{_type_fields(pk_keys)}
    }};
{sk_type}
    type data = {{
        data: string;
    }};

    const keySchema: KeySchema = {{
        pk: {{
            name: '{partition_key}',
            keys: [{pk_names}],
            separator: '#'
        }},{sk_schema}
    }};

    const messageTable: {table_type} = client.table(tableName, keySchema);
    await messageTable.put({{
{_props(_unique(pk_keys + sk_keys), 8)},
        data: 'Hello!',
    }});
    const result = await messageTable.getOne({key_args});
    console.log(result);
    await messageTable.delete({key_args});
    return result;
}}
'''


def table_handler_test(table_name: str, partition_key: str, sort_key: str = "") -> str:
    keys = _unique(partition_key.split("#") + (sort_key.split("#") if sort_key else []))
    function_name = table_query_function(table_name)
    return f'''import {{ {function_name} }} from './{table_name}Handler';

jest.mock('dynamo-query-builder', () => {{
    const mockTable = {{
        put: jest.fn().mockResolvedValue(undefined),
        getOne: jest.fn().mockResolvedValue({{
{_props(keys, 12)},
            data: 'Hello!',
        }}),
        delete: jest.fn().mockResolvedValue(undefined),
    }};

    return {{
        DynamoClient: jest.fn().mockImplementation(() => ({{
            table: jest.fn().mockReturnValue(mockTable),
        }})),
    }};
}});

describe('{table_name}Handler', () => {{
    beforeEach(() => {{
        jest.clearAllMocks();
    }});

    describe('{function_name}', () => {{
        it('should return the stored item', async () => {{
            const result = await {function_name}();

            expect(result).toEqual({{
{_props(keys, 16)},
                data: 'Hello!',
            }});
        }});

        it('should execute the complete flow successfully', async () => {{
            const result = await {function_name}();

            expect(result).toBeDefined();
            expect(result.data).toBe('Hello!');
        }});
    }});
}});
'''


def package_json(project_name: str, stack_name: str) -> dict:
    print_urls = (
        f"aws cloudformation describe-stacks --stack-name {stack_name} "
        "--query \"Stacks[0].Outputs[?contains(OutputKey, 'Url')].OutputValue\" "
        "--output text | tr '\\t' '\\n'"
    )
    return {
        "name": project_name,
        "version": "1.0.0",
        "description": f"{project_name} serverless project generated by sam-smith",
        "scripts": {
            "test": "jest",
            "build": "sam build",
            "sam-smith:deploy": (
                "sam build && sam deploy"
                f" && echo \"\" && echo \"API Gateway URLs:\" && {print_urls}"
            ),
            "sam-smith:update": "sam-smith update .",
        },
        "dependencies": {
            "dynamo-query-builder": "^1.0.0",
        },
        "devDependencies": {
            "@types/aws-lambda": "^8.10.92",
            "@types/jest": "^29.2.0",
            "@types/node": "^20.5.7",
            "esbuild": "^0.19.0",
            "jest": "^29.2.1",
            "ts-jest": "^29.0.5",
            "ts-node": "^10.9.1",
            "typescript": "^5.2.2",
        },
    }


TSCONFIG = '''{
    "compilerOptions": {
        "target": "es2020",
        "strict": true,
        "preserveConstEnums": true,
        "noEmit": true,
        "sourceMap": false,
        "module": "commonjs",
        "moduleResolution": "node",
        "esModuleInterop": true,
        "skipLibCheck": true,
        "forceConsistentCasingInFileNames": true
    },
    "exclude": ["node_modules", "**/*.test.ts", "**/*.spec.ts"]
}
'''

JEST_CONFIG = '''module.exports = {
    transform: {
        '^.+\\\\.ts?$': 'ts-jest',
    },
    clearMocks: true,
    collectCoverage: true,
    coverageDirectory: 'coverage',
    coverageProvider: 'v8',
    testMatch: ['**/src/**/*.test.ts', '**/src/**/*.spec.ts'],
};
'''
