#!/usr/bin/env python3
"""Plugin management CLI tool."""

import argparse
import asyncio
import json
import logging
import shutil
import sys
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from scaforge.config.loader import ConfigStore, get_codec
from scaforge.config.types import create_default_config
from scaforge.constants import INSTALLED_PLUGINS_DIR, LOG_DIR, PROJECT_ROOT, SYMMETRIC_CONFLICTS
from scaforge.dependencies import build_catalog, create_manager, get_rule_engine
from scaforge.errors import ScaforgeError, format_error_for_display
from scaforge.integrations.engine import find_integrations_targeting, run_integrations
from scaforge.plugins.discovery import PluginDiscovery
from scaforge.plugins.manager import PluginManager, check_invariants
from scaforge.plugins.manifest import FrameworkTarget, PluginCategory

logger = logging.getLogger(__name__)

console = Console()


_logging_configured = False


def setup_logging(verbose: bool = False) -> None:
    """Log INFO and above to logs/, and to the console only at WARNING unless --verbose."""
    global _logging_configured
    if _logging_configured:
        return

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)

    LOG_DIR.mkdir(exist_ok=True)
    file_handler = logging.FileHandler(
        LOG_DIR / f"manage_plugins_{datetime.now().strftime('%Y%m%d')}.log",
        encoding='utf-8'
    )
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))

    # Keep INFO logs out of command output
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO if verbose else logging.WARNING)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)
    _logging_configured = True


def fail(message: str) -> None:
    console.print(f"[red]{escape(message)}[/red]")
    sys.exit(1)


def fail_with(error: ScaforgeError) -> None:
    fail(format_error_for_display(error))


def get_store(args) -> ConfigStore:
    """Create a ConfigStore for --project."""
    return ConfigStore(Path(args.project))


def get_manager(args) -> PluginManager:
    store = get_store(args)
    try:
        config = store.load()
    except ScaforgeError as e:
        fail_with(e)
    manager = create_manager(config, build_catalog())
    if getattr(args, "strict", False):
        manager.auto_install_dependencies = False
    return manager


def parse_options(pairs) -> dict:
    """Parse key=value pairs; values are JSON when they parse as JSON."""
    options = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            fail(f"Invalid option '{pair}', expected key=value")
        try:
            options[key] = json.loads(value)
        except json.JSONDecodeError:
            options[key] = value
    return options


def cmd_init(args):
    """Create a project config."""
    codec = get_codec(args.format)
    store = ConfigStore(Path(args.project), codec)
    if store.exists():
        fail(f"Project config already exists: {store.path}")

    try:
        config = create_default_config(args.name, FrameworkTarget(args.target))
    except ValueError as e:
        fail(f"Invalid project: {e}")
    store.save(config)
    console.print(f"Created {store.path} ({args.target})")


def cmd_list(args):
    """List catalog plugins or installed plugins."""
    catalog = build_catalog()

    installed = set()
    store = get_store(args)
    if store.exists():
        try:
            installed = set(store.load().enabled_plugins())
        except ScaforgeError as e:
            fail_with(e)
    elif args.installed:
        fail(f"No project config at {store.path}")

    plugins = catalog.get_by_category(PluginCategory(args.category)) if args.category else catalog.get_all()
    if args.installed:
        plugins = [p for p in plugins if p.name in installed]

    if not plugins:
        console.print("No plugins found.")
        return

    table = Table(title="Installed plugins" if args.installed else f"Available plugins ({len(plugins)})")
    table.add_column("Name", style="cyan")
    table.add_column("Category")
    table.add_column("Targets")
    table.add_column("Depends on")
    table.add_column("Installed")

    for p in sorted(plugins, key=lambda p: (p.category.value, p.name)):
        table.add_row(
            p.name,
            p.category.value,
            ", ".join(t.value for t in p.supported_targets),
            ", ".join(p.dependencies) or "-",
            "Yes" if p.name in installed else "No",
        )
    console.print(table)


def cmd_info(args):
    """Show detailed plugin information."""
    manifest = build_catalog().get(args.plugin)
    if not manifest:
        fail(f"Plugin '{args.plugin}' not found.")

    console.print(f"Plugin: [bold]{manifest.name}[/bold]")
    console.print(f"  Name:         {manifest.display_name}")
    console.print(f"  Version:      {manifest.version}")
    console.print(f"  Category:     {manifest.category.value}")
    console.print(f"  Description:  {manifest.description}")
    console.print(f"  Targets:      {', '.join(t.value for t in manifest.supported_targets)}")
    console.print(f"  Dependencies: {', '.join(manifest.dependencies) or '-'}")
    console.print(f"  Conflicts:    {', '.join(manifest.conflicts) or '-'}")
    for integration in manifest.integrations:
        console.print(f"  Integrates:   {integration.plugin} ({integration.type})")
    if manifest.config_schema is not None:
        console.print(f"  Defaults:     {json.dumps(manifest.config_schema.defaults(), indent=4)}")


def cmd_add(args):
    """Add a plugin to the project."""
    store = get_store(args)
    manager = get_manager(args)
    manifest = manager.catalog.get(args.plugin)
    existing = manager.get_installed()

    try:
        if manifest is not None:
            options = manifest.resolve_options(parse_options(args.option))
        else:
            options = {}
        result = manager.add(args.plugin, options)
    except ScaforgeError as e:
        fail_with(e)

    store.save(manager.get_config())

    for dep in result.installed_dependencies:
        console.print(f"  + {dep} (dependency)")
    console.print(f"[green]{result.message}[/green]")

    rules = get_rule_engine().get_rules_for_new_plugin(args.plugin, existing + result.installed_dependencies)
    for match in rules:
        a, b = match.matched_plugins
        console.print(f"  Integration [bold]{match.rule.id}[/bold]: {a} + {b} ({match.rule.description})")

    config = manager.get_config()
    integrations = asyncio.run(run_integrations(manifest, config, dry_run=True))
    for applied in integrations.applied:
        for path in applied.generated_files:
            console.print(f"  {applied.target_plugin}: {path}")
    for reverse in find_integrations_targeting(args.plugin, config, manager.catalog):
        for path in reverse.files:
            console.print(f"  {reverse.source_plugin}: {path}")

    if manifest.post_install:
        console.print(f"\nNext steps:\n{manifest.post_install}")


def cmd_remove(args):
    """Remove a plugin from the project."""
    store = get_store(args)
    manager = get_manager(args)
    try:
        result = manager.remove(args.plugin)
    except ScaforgeError as e:
        fail_with(e)

    store.save(manager.get_config())
    console.print(f"[green]{result.message}[/green]")
    console.print("Note: generated files and packages are not removed.")


def cmd_validate(args):
    """Pre-flight check for add/remove."""
    manager = get_manager(args)
    if args.action == "add":
        validation = manager.validate_add(args.plugin)
    else:
        validation = manager.validate_remove(args.plugin)

    if validation.valid:
        console.print(f"[green]{args.action} {args.plugin}: OK[/green]")
        return
    console.print(f"[red]Cannot {args.action} plugin '{args.plugin}':[/red]")
    for message in validation.messages:
        console.print(f"  {message}")
    sys.exit(1)


def cmd_rules(args):
    """Show auto-integration rules matched by the installed plugins."""
    manager = get_manager(args)
    matches = get_rule_engine().find_matching_rules(manager.get_installed())
    if not matches:
        console.print("No auto-integrations apply.")
        return

    table = Table(title="Auto-integrations")
    table.add_column("Priority", justify="right")
    table.add_column("Rule", style="cyan")
    table.add_column("Plugins")
    table.add_column("Action")
    for match in matches:
        table.add_row(
            str(match.rule.priority),
            match.rule.id,
            " + ".join(match.matched_plugins),
            match.rule.action.type.value if match.rule.action else "-",
        )
    console.print(table)


def cmd_install(args):
    """Install a plugin manifest directory from a local path."""
    source = Path(args.path).resolve()
    if not source.exists():
        fail(f"Path does not exist: {source}")

    manifest = PluginDiscovery([]).discover_single(source, "installed")
    if manifest is None:
        fail(f"No valid {PluginDiscovery.MANIFEST_FILE} found at {source}")

    dest = INSTALLED_PLUGINS_DIR / manifest.name
    if dest.exists():
        fail(f"Plugin '{manifest.name}' already installed at {dest}")

    INSTALLED_PLUGINS_DIR.mkdir(parents=True, exist_ok=True)
    shutil.copytree(source, dest)
    console.print(f"Plugin '{manifest.name}' installed to {dest}")
    console.print(f"Run 'python manage_plugins.py add {manifest.name}' to add it to a project.")


def cmd_doctor(args):
    """Run health checks on the project and the plugin catalog."""
    issues = []

    engine = get_rule_engine()
    issues.extend(engine.validate_rules())

    catalog = build_catalog()
    for manifest in catalog.get_all():
        for dep in manifest.dependencies:
            if not catalog.has(dep):
                issues.append(f"Plugin '{manifest.name}' depends on unknown plugin '{dep}'")

    store = get_store(args)
    if not store.exists():
        issues.append(f"Project config file missing: {store.path}")
    else:
        try:
            config = store.load()
            errors = check_invariants(config, catalog, symmetric_conflicts=SYMMETRIC_CONFLICTS)
            issues.extend(e.message for e in errors)
        except ScaforgeError as e:
            issues.append(e.message)

    if issues:
        console.print(f"Found {len(issues)} issue(s):")
        for i, issue in enumerate(issues, 1):
            console.print(f"  {i}. {issue}")
        sys.exit(1)
    else:
        console.print(f"All checks passed. {catalog.count()} plugin(s) in catalog.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Scaforge Plugin Manager")
    parser.add_argument("-p", "--project", default=str(PROJECT_ROOT), help="Project directory")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show info logs")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # init
    init_parser = subparsers.add_parser("init", help="Create a project config")
    init_parser.add_argument("name", help="Project name")
    init_parser.add_argument("-t", "--target", default="nextjs", choices=[t.value for t in FrameworkTarget])
    init_parser.add_argument("-f", "--format", default="json", choices=["json", "yaml"])

    # list
    list_parser = subparsers.add_parser("list", help="List plugins")
    list_parser.add_argument("-i", "--installed", action="store_true", help="Only installed plugins")
    list_parser.add_argument("-c", "--category", choices=[c.value for c in PluginCategory])

    # info
    info_parser = subparsers.add_parser("info", help="Show plugin details")
    info_parser.add_argument("plugin", help="Plugin name")

    # add
    add_parser = subparsers.add_parser("add", help="Add a plugin to the project")
    add_parser.add_argument("plugin", help="Plugin name")
    add_parser.add_argument("-o", "--option", action="append", help="Plugin option as key=value")
    add_parser.add_argument("--strict", action="store_true", help="Fail instead of installing dependencies")

    # remove
    remove_parser = subparsers.add_parser("remove", help="Remove a plugin from the project")
    remove_parser.add_argument("plugin", help="Plugin name")

    # validate
    validate_parser = subparsers.add_parser("validate", help="Check whether add/remove would succeed")
    validate_parser.add_argument("action", choices=["add", "remove"])
    validate_parser.add_argument("plugin", help="Plugin name")
    validate_parser.add_argument("--strict", action="store_true", help="Use the strict dependency policy")

    # rules
    subparsers.add_parser("rules", help="Show matched auto-integration rules")

    # install
    install_parser = subparsers.add_parser("install", help="Install a plugin manifest from local path")
    install_parser.add_argument("path", help="Path to plugin directory")

    # doctor
    subparsers.add_parser("doctor", help="Run health checks")

    return parser


def main(argv=None):
    load_dotenv('.env')
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    setup_logging(args.verbose)

    commands = {
        "init": cmd_init,
        "list": cmd_list,
        "info": cmd_info,
        "add": cmd_add,
        "remove": cmd_remove,
        "validate": cmd_validate,
        "rules": cmd_rules,
        "install": cmd_install,
        "doctor": cmd_doctor,
    }

    commands[args.command](args)


if __name__ == "__main__":
    main()
