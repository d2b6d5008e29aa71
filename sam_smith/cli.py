#!/usr/bin/env python3
"""
Command-line interface for sam-smith.

`sam-smith create` walks developers through scaffolding a new SAM project;
`sam-smith update` edits an existing one through an interactive menu.
"""

import argparse
import logging
import os
import sys
from typing import List

from . import __version__
from .config import ARCHITECTURES, Settings
from .envfile import read_env_file
from .errors import SamSmithError
from .generator import TEMPLATES, ProjectGenerator
from .operations import (
    add_basic_auth,
    add_cognito_auth,
    add_endpoint,
    add_lambda,
    attach_layer,
    attach_tables,
    create_api_gateway,
    create_layer,
    create_table,
    delete_api_gateway,
    delete_endpoint,
    delete_lambda,
    delete_layer,
    delete_table,
    detach_layer,
    detach_tables,
    list_gateway_endpoints,
    list_lambdas,
    list_layers,
    list_tables,
    reconcile_environment,
    remove_auth,
    update_endpoint,
    update_lambda,
)
from .operations.api import METHODS
from .project import SamProject


# ANSI color codes for terminal output
class Colors:
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    BOLD = '\033[1m'
    END = '\033[0m'


def print_header(text: str):
    """Print a styled header."""
    print(f"\n{Colors.BOLD}{Colors.CYAN}{'='*60}{Colors.END}")
    print(f"{Colors.BOLD}{Colors.CYAN}{text.center(60)}{Colors.END}")
    print(f"{Colors.BOLD}{Colors.CYAN}{'='*60}{Colors.END}\n")


def print_section(text: str):
    """Print a section header."""
    print(f"\n{Colors.BOLD}{Colors.BLUE}>>> {text}{Colors.END}")
    print(f"{Colors.BLUE}{'-'*50}{Colors.END}")


def print_success(text: str):
    """Print a success message."""
    print(f"{Colors.GREEN}✓ {text}{Colors.END}")


def print_error(text: str):
    """Print an error message."""
    print(f"{Colors.RED}✗ {text}{Colors.END}")


def print_info(text: str):
    """Print an info message."""
    print(f"{Colors.YELLOW}ℹ {text}{Colors.END}")


def prompt(text: str, default: str = None) -> str:
    """Prompt user for input with optional default value."""
    if default:
        result = input(f"{Colors.BOLD}{text}{Colors.END} [{Colors.CYAN}{default}{Colors.END}]: ").strip()
        return result if result else default
    return input(f"{Colors.BOLD}{text}{Colors.END}: ").strip()


def prompt_yes_no(text: str, default: bool = True) -> bool:
    """Prompt user for yes/no input."""
    default_str = "Y/n" if default else "y/N"
    result = input(f"{Colors.BOLD}{text}{Colors.END} [{Colors.CYAN}{default_str}{Colors.END}]: ").strip().lower()
    if not result:
        return default
    return result in ('y', 'yes', 'true', '1')


def prompt_int(text: str, default: int) -> int:
    """Prompt until the user enters a positive integer."""
    while True:
        result = prompt(text, str(default))
        if result.isdigit() and int(result) > 0:
            return int(result)
        print_error("Please enter a positive whole number")


def prompt_choice(text: str, choices: List[str], default: int = 0) -> int:
    """Prompt user to choose from a list of options."""
    print(f"\n{Colors.BOLD}{text}{Colors.END}")
    for i, choice in enumerate(choices):
        marker = f"{Colors.GREEN}*{Colors.END}" if i == default else " "
        print(f"  {marker} [{i+1}] {choice}")

    while True:
        result = input(f"\nEnter choice (1-{len(choices)}) [{default+1}]: ").strip()
        if not result:
            return default
        try:
            idx = int(result) - 1
            if 0 <= idx < len(choices):
                return idx
        except ValueError:
            pass
        print_error(f"Invalid choice. Please enter a number between 1 and {len(choices)}")


def prompt_multi_choice(text: str, choices: List[str]) -> List[int]:
    """Prompt user to select multiple options."""
    print(f"\n{Colors.BOLD}{text}{Colors.END}")
    print(f"{Colors.YELLOW}(Enter numbers separated by commas, or 'all' for all options){Colors.END}")
    for i, choice in enumerate(choices):
        print(f"  [{i+1}] {choice}")

    while True:
        result = input(f"\nEnter choices: ").strip().lower()
        if result == 'all':
            return list(range(len(choices)))
        if not result:
            return []
        try:
            indices = [int(x.strip()) - 1 for x in result.split(',')]
            if all(0 <= idx < len(choices) for idx in indices):
                return indices
        except ValueError:
            pass
        print_error("Invalid input. Please enter numbers separated by commas.")


def pick(text: str, names: List[str]) -> str:
    """Choose one name from a list; an empty list is reported as an error."""
    if not names:
        raise SamSmithError(f"Nothing to choose from for: {text}")
    return names[prompt_choice(text, names)]


def pick_many(text: str, names: List[str]) -> List[str]:
    if not names:
        return []
    return [names[i] for i in prompt_multi_choice(text, names)]


# Create

def configure_project(settings: Settings) -> ProjectGenerator:
    """Collect generator inputs interactively."""
    print_section("Project Configuration")

    project_name = prompt("Enter project name", "sam-app")
    gen = ProjectGenerator(project_name, settings)

    template = TEMPLATES[prompt_choice("Choose a starting template:", list(TEMPLATES))]
    pool_name = "main"
    if template == "cognito-auth":
        pool_name = prompt("Cognito user pool name", "main")
    gen.set_template(template, pool_name)

    env_file = prompt("Path to .env file", gen.env_file)
    gen.env_file = env_file

    print_section("Lambda Configuration")
    function_name = prompt("First Lambda name", project_name)
    timeout = prompt_int("Timeout (seconds)", 60)
    env = gen.read_env()
    env_vars = pick_many("Environment variables for this Lambda:", list(env))
    gen.set_function(function_name, timeout, env_vars)

    architecture = ARCHITECTURES[prompt_choice(
        "Architecture:", list(ARCHITECTURES), ARCHITECTURES.index(gen.architecture)
    )]
    gen.architecture = architecture

    print_section("API Gateway Configuration")
    gen.set_api(prompt("API Gateway name", gen.api_name))
    return gen


def display_summary(gen: ProjectGenerator):
    """Display configuration summary."""
    print_section("Configuration Summary")

    print(f"  Project Name: {Colors.CYAN}{gen.project_name}{Colors.END}")
    print(f"  Template: {Colors.CYAN}{gen.template_name}{Colors.END}")
    print(f"  Lambda: {Colors.CYAN}{gen.function_name}{Colors.END} ({gen.timeout}s, {gen.architecture})")
    print(f"  Environment: {Colors.CYAN}{', '.join(gen.env_vars) or 'None'}{Colors.END}")
    print(f"  API Gateway: {Colors.CYAN}{gen.api_name}{Colors.END}")
    if gen.template_name == "cognito-auth":
        print(f"    - User Pool: {Colors.CYAN}{gen.pool_name}UserPool{Colors.END}")


def finish_create(gen: ProjectGenerator, output_dir: str):
    project = gen.generate(output_dir)

    print_header("Generation Complete!")
    print(f"Project generated in: {Colors.CYAN}{project.path}{Colors.END}")
    print("\nNext steps:")
    print(f"  1. cd {project.path} && npm install")
    print("  2. npm test")
    print("  3. sam build && sam deploy")


def create_mode(args, settings: Settings):
    """Run the interactive project generator."""
    if args.config:
        print_header("Generating from Configuration")
        gen = ProjectGenerator.from_json(args.config, settings)
        print_success(f"Loaded configuration from: {args.config}")
        display_summary(gen)
        finish_create(gen, args.output)
        return

    print_header("sam-smith Project Generator")
    print("This tool will scaffold a TypeScript SAM project with one Lambda")
    print("behind an API Gateway.\n")

    gen = configure_project(settings)
    display_summary(gen)

    if prompt_yes_no("\nGenerate project with this configuration?", True):
        finish_create(gen, prompt("Output directory", args.output))
    else:
        print_info("Generation cancelled")


# Update

def update_environment(project: SamProject):
    print_section("Environment Variables")
    env = read_env_file(project.env_path)
    result = reconcile_environment(
        project,
        env,
        add_new=prompt_yes_no("Add new variables from .env?", True),
        remove_old=prompt_yes_no("Remove variables missing from .env?", True),
        update_changed=prompt_yes_no("Update changed values?", True),
        confirm=lambda name: prompt_yes_no(f"Remove {name} from the template?", True),
    )
    for label, names in (("Added", result.added), ("Removed", result.removed),
                         ("Updated", result.changed), ("Kept", result.kept)):
        if names:
            print_success(f"{label}: {', '.join(names)}")
    if not (result.added or result.removed or result.changed):
        print_info("Template already matches .env")


def lambda_names(project: SamProject) -> List[str]:
    return [row.resource for row in list_lambdas(project)]


def update_lambdas(project: SamProject):
    action = prompt_choice("Lambdas:", ["List", "Add", "Update", "Delete", "Back"])
    if action == 0:
        for row in list_lambdas(project):
            print(f"  {Colors.CYAN}{row.resource}{Colors.END} src/{row.folder} timeout={row.timeout}")
            for label, values in (("env", row.env_vars), ("layers", row.layers), ("policies", row.policies)):
                if values:
                    print(f"    {label}: {', '.join(values)}")
    elif action == 1:
        name = prompt("Lambda name")
        timeout = prompt_int("Timeout (seconds)", 60)
        env_vars = pick_many("Environment variables:", list(project.load_template().env_parameters()))
        print_success(f"Added {add_lambda(project, name, timeout, env_vars)}")
    elif action == 2:
        rows = {row.resource: row for row in list_lambdas(project)}
        name = pick("Lambda to update:", list(rows))
        current = rows[name].timeout
        timeout = prompt_int("Timeout (seconds)", int(current) if current and current.isdigit() else 60)
        env_vars = None
        if prompt_yes_no("Replace environment variables?", False):
            env_vars = pick_many("Environment variables:", list(project.load_template().env_parameters()))
        update_lambda(project, name, timeout, env_vars)
        print_success(f"Updated {name}")
    elif action == 3:
        name = pick("Lambda to delete:", lambda_names(project))
        if prompt_yes_no(f"Delete {name} and its source folder?", False):
            delete_lambda(project, name)
            print_success(f"Deleted {name}")


def prompt_endpoint(project: SamProject):
    method = METHODS[prompt_choice("HTTP method:", [m.upper() for m in METHODS])]
    path = prompt("Path", "/")
    lambda_name = pick("Target Lambda:", lambda_names(project))
    return method, path, lambda_name


def update_apis(project: SamProject):
    action = prompt_choice("API Gateways:", ["List endpoints", "Create gateway", "Delete gateway",
                                             "Add endpoint", "Update endpoint", "Delete endpoint", "Back"])
    apis = [node.key for node in project.load_template().apis()]
    if action == 0:
        rows = list_gateway_endpoints(project)
        if not rows:
            print_info("No endpoints")
        for row in rows:
            print(f"  {row.api}: {row.method.upper():7} {row.path} -> {row.function} ({row.event})")
    elif action == 1:
        name = prompt("Gateway name")
        endpoint = prompt_endpoint(project) if prompt_yes_no("Add a first endpoint?", True) else None
        print_success(f"Created {create_api_gateway(project, name, endpoint)}")
    elif action == 2:
        name = pick("Gateway to delete:", apis)
        if prompt_yes_no(f"Delete {name} and every endpoint bound to it?", False):
            removed = delete_api_gateway(project, name)
            print_success(f"Deleted {name} and {removed} endpoint(s)")
    elif action == 3:
        gateway = pick("Gateway:", apis)
        method, path, lambda_name = prompt_endpoint(project)
        event = add_endpoint(project, gateway, method, path, lambda_name)
        print_success(f"Added {event}")
    elif action in (4, 5):
        rows = list_gateway_endpoints(project)
        labels = [f"{row.api}: {row.method.upper()} {row.path} -> {row.function}" for row in rows]
        row = rows[labels.index(pick("Endpoint:", labels))]
        if action == 4:
            current = METHODS.index(row.method) if row.method in METHODS else 0
            new_method = METHODS[prompt_choice("New method:", [m.upper() for m in METHODS], current)]
            new_path = prompt("New path", row.path)
            new_lambda = pick("Target Lambda:", lambda_names(project))
            update_endpoint(project, row.api, row.method, row.path, row.function,
                            new_method, new_path, new_lambda)
            print_success("Endpoint updated")
        else:
            delete_endpoint(project, row.api, row.method, row.path, row.function)
            print_success("Endpoint deleted")


def update_auth(project: SamProject):
    action = prompt_choice("Authentication:", ["Add basic auth", "Add Cognito auth", "Remove auth", "Back"])
    if action == 3:
        return
    gateway = pick("Gateway:", [node.key for node in project.load_template().apis()])
    if action == 0:
        add_basic_auth(project, gateway)
        print_success(f"Basic auth added to {gateway}")
    elif action == 1:
        pool_name = prompt("User pool name", "main")
        add_cognito_auth(project, gateway, pool_name)
        print_success(f"Cognito auth added to {gateway}")
    else:
        kind = remove_auth(project, gateway)
        print_success(f"Removed {kind} from {gateway}")


def update_layers(project: SamProject):
    action = prompt_choice("Layers:", ["List", "Create", "Delete", "Attach", "Detach", "Back"])
    layers = list_layers(project)
    if action == 0:
        if not layers:
            print_info("No layers")
        for name, functions in layers.items():
            print(f"  {Colors.CYAN}{name}{Colors.END}: {', '.join(functions) or 'unused'}")
    elif action == 1:
        name = prompt("Layer name")
        create_layer(project, name)
        print_success(f"Created {name}")
    elif action == 2:
        name = pick("Layer to delete:", list(layers))
        delete_layer(project, name)
        print_success(f"Deleted {name}")
    elif action in (3, 4):
        name = pick("Layer:", list(layers))
        lambda_name = pick("Lambda:", lambda_names(project))
        if action == 3:
            attach_layer(project, lambda_name, name)
            print_success(f"Attached {name} to {lambda_name}")
        else:
            detach_layer(project, lambda_name, name)
            print_success(f"Detached {name} from {lambda_name}")


def update_tables(project: SamProject):
    action = prompt_choice("Tables:", ["List", "Create", "Delete", "Attach", "Detach", "Back"])
    tables = list_tables(project)
    if action == 0:
        if not tables:
            print_info("No tables")
        for name, functions in tables.items():
            print(f"  {Colors.CYAN}{name}{Colors.END}: {', '.join(functions) or 'unused'}")
    elif action == 1:
        name = prompt("Table name")
        partition_key = prompt("Partition key (parts separated by #)", "pk")
        sort_key = prompt("Sort key (empty for none)")
        create_table(project, name, partition_key, sort_key)
        print_success(f"Created {name}")
    elif action == 2:
        name = pick("Table to delete:", list(tables))
        delete_table(project, name)
        print_success(f"Deleted {name}")
    elif action in (3, 4):
        lambda_name = pick("Lambda:", lambda_names(project))
        selected = pick_many("Tables:", list(tables))
        if not selected:
            print_info("No tables selected")
        elif action == 3:
            attach_tables(project, lambda_name, selected)
            print_success(f"Attached {', '.join(selected)} to {lambda_name}")
        else:
            detach_tables(project, lambda_name, selected)
            print_success(f"Detached {', '.join(selected)} from {lambda_name}")


UPDATE_MENU = [
    ("Environment Variables", update_environment),
    ("Lambdas", update_lambdas),
    ("API Gateways", update_apis),
    ("Authentication", update_auth),
    ("Layers", update_layers),
    ("Tables", update_tables),
]


def update_mode(args, settings: Settings):
    """Edit an existing project until the user exits."""
    project = SamProject(args.path, settings)
    project.load_template()
    print_header(f"sam-smith: {project.name}")

    choices = [label for label, _ in UPDATE_MENU] + ["Exit"]
    while True:
        choice = prompt_choice("What would you like to update?", choices)
        if choice == len(UPDATE_MENU):
            break
        try:
            UPDATE_MENU[choice][1](project)
        except SamSmithError as e:
            print_error(str(e))


def main():
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog="sam-smith",
        description="Scaffold and evolve TypeScript AWS SAM projects",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  sam-smith create                       # Interactive project generator
  sam-smith create --config app.json     # Generate from config file
  sam-smith update ./my-app              # Edit an existing project
        """
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Log placement decisions and file writes'
    )

    parser.add_argument(
        '--version', '-v',
        action='version',
        version=f'sam-smith {__version__}'
    )

    subparsers = parser.add_subparsers(dest='command')

    create = subparsers.add_parser('create', help='Generate a new project')
    create.add_argument(
        '--config', '-c',
        metavar='FILE',
        help='Load configuration from JSON file'
    )
    create.add_argument(
        '--output', '-o',
        metavar='DIR',
        default='.',
        help='Parent directory of the new project (default: .)'
    )

    update = subparsers.add_parser('update', help='Edit an existing project')
    update.add_argument(
        'path',
        nargs='?',
        default='.',
        help='Project directory (default: .)'
    )

    args = parser.parse_args()
    if args.command is None:
        parser.print_help()
        return

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == 'create':
            create_mode(args, Settings.from_env())
        else:
            settings = Settings.from_env(os.path.join(os.path.abspath(args.path), ".env"))
            update_mode(args, settings)
    except KeyboardInterrupt:
        print("\n")
        print_info("Operation cancelled by user")
        sys.exit(0)
    except SamSmithError as e:
        print_error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
