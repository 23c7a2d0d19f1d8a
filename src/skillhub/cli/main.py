"""
Main CLI entry point for SkillHub.

Provides the command-line interface using Click.
"""

import contextlib as _contextlib
import datetime as _datetime
import json as _json
import logging as _logging
import pathlib as _pathlib
import typing as _typing

import click as _click
import rich.console as _rich_console
import rich.table as _rich_table
import yaml as _yaml

import skillhub
import skillhub.config as config
import skillhub.errors as errors
import skillhub.manager as manager
import skillhub.models as models

# Custom Click context settings for better help formatting
CONTEXT_SETTINGS: dict[str, _typing.Any] = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 100,
}

_MODE_CHOICES = ["auto", "symlink", "copy", "configPatch", "config-patch"]


def _fail(
    message: str,
    *,
    json_output: bool = False,
    notes: list[str] | None = None,
) -> _typing.NoReturn:
    """Report an error and exit with status 1."""
    if json_output:
        payload: dict[str, _typing.Any] = {"error": message}
        if notes:
            payload["notes"] = notes
        _click.echo(_json.dumps(payload, indent=2))
    else:
        _click.echo(f"Error: {message}", err=True)
        for note in notes or []:
            _click.echo(f"  {note}", err=True)
    raise SystemExit(1)


@_contextlib.contextmanager
def _reporting_errors(json_output: bool = False) -> _typing.Iterator[None]:
    """Turn SkillHubError into an error report and exit status 1."""
    try:
        yield
    except errors.SkillHubError as e:
        _fail(str(e), json_output=json_output, notes=list(getattr(e, "__notes__", [])))


def _echo_json(data: _typing.Any) -> None:
    _click.echo(_json.dumps(data, indent=2))


def _get_manager(ctx: _click.Context) -> manager.SkillManager:
    """The SkillManager for this invocation, built on first use."""
    obj = ctx.ensure_object(dict)
    if "manager" not in obj:
        obj["manager"] = manager.SkillManager.from_settings(obj["settings"])
    return obj["manager"]


def _print_table(table: _rich_table.Table) -> None:
    _rich_console.Console().print(table)


@_click.group(context_settings=CONTEXT_SETTINGS)
@_click.version_option(skillhub.__version__, "-V", "--version", prog_name="skillhub")
@_click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@_click.pass_context
def cli(ctx: _click.Context, verbose: bool) -> None:
    """
    SkillHub - deploy skills into editors, CLIs and agents.

    \b
    Examples:
        skillhub products                      # Show known products
        skillhub stage ./skills/git-lfs        # Copy a skill into the store
        skillhub apply ./skills/git-lfs vscode # Stage, install and enable
        skillhub status git-lfs                # Show where a skill is deployed
    """
    obj = ctx.ensure_object(dict)

    if "settings" not in obj:
        try:
            obj["settings"] = config.Settings()
        except config.ConfigFileError as e:
            _click.echo(f"Error: {e}", err=True)
            raise SystemExit(1) from None

    settings: config.Settings = obj["settings"]
    level = "debug" if verbose else settings.logging.level
    _logging.basicConfig(
        level=getattr(_logging, level.upper()),
        format="%(levelname)s %(name)s: %(message)s",
    )


# =============================================================================
# Products
# =============================================================================


@cli.command()
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def products(ctx: _click.Context, json_output: bool) -> None:
    """List known products, their detection status and install modes."""
    infos = _get_manager(ctx).products()

    if json_output:
        _echo_json([info.to_dict() for info in infos])
        return

    table = _rich_table.Table(title="Products")
    table.add_column("ID", no_wrap=True)
    table.add_column("Name")
    table.add_column("Detected")
    table.add_column("Modes")
    table.add_column("Skills directory")
    for info in infos:
        table.add_row(
            info.adapter.id,
            info.adapter.name,
            "✓" if info.detection.is_detected else "✗",
            ", ".join(m.value for m in info.adapter.supported_install_modes),
            str(info.adapter.skills_directory()),
        )
    _print_table(table)


@cli.command()
@_click.option("--json", "json_output", is_flag=True, help="JSON readiness report")
@_click.pass_context
def detect(ctx: _click.Context, json_output: bool) -> None:
    """Show detection status for known products."""
    infos = _get_manager(ctx).products()

    if json_output:
        adapters_report = [
            {
                "id": info.adapter.id,
                "name": info.adapter.name,
                "detected": info.detection.is_detected,
                "reason": info.detection.reason,
                "supportedModes": [m.value for m in info.adapter.supported_install_modes],
            }
            for info in infos
        ]
        _echo_json(
            {
                "timestamp": _datetime.datetime.now(_datetime.UTC).isoformat(),
                "version": skillhub.__version__,
                "adapters": adapters_report,
                "overallReady": any(a["detected"] for a in adapters_report),
            }
        )
        return

    _click.echo("Detection report:")
    for info in infos:
        status = "detected" if info.detection.is_detected else "not detected"
        _click.echo(f"- {info.adapter.id}: {status} - {info.detection.reason}")


@cli.command()
@_click.option("--product", "product_id", default=None, help="Check one product only")
@_click.option("--fix", "apply_fix", is_flag=True, help="Create missing skills directories")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def doctor(ctx: _click.Context, product_id: str | None, apply_fix: bool, json_output: bool) -> None:
    """Check product skills directories and config documents.

    Exits with status 1 if any issue remains.
    """
    skill_manager = _get_manager(ctx)
    with _reporting_errors(json_output):
        if apply_fix:
            diagnoses = skill_manager.fix(product_id)
        else:
            diagnoses = skill_manager.diagnose(product_id)

    if json_output:
        _echo_json([d.to_dict() for d in diagnoses])
    else:
        for diagnosis in diagnoses:
            marker = "✓" if diagnosis.ok else "✗"
            detected = "detected" if diagnosis.detection.is_detected else "not detected"
            _click.echo(f"{marker} {diagnosis.product_id} ({detected})")
            for fixed in diagnosis.fixed:
                _click.echo(f"    fixed: {fixed}")
            for issue in diagnosis.issues:
                _click.echo(f"    {issue}")

    if not all(d.ok for d in diagnoses):
        raise SystemExit(1)


# =============================================================================
# Skills
# =============================================================================


@cli.command()
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def skills(ctx: _click.Context, json_output: bool) -> None:
    """List registered skills."""
    with _reporting_errors(json_output):
        records = _get_manager(ctx).list_skills()

    if json_output:
        _echo_json([record.to_json_dict() for record in records])
        return

    if not records:
        _click.echo("No skills registered.")
        return

    table = _rich_table.Table(title="Skills")
    table.add_column("ID", no_wrap=True)
    table.add_column("Version")
    table.add_column("Name")
    table.add_column("Installed")
    table.add_column("Enabled")
    for record in records:
        table.add_row(
            record.id,
            record.manifest.version,
            record.manifest.name,
            ", ".join(record.installed_products) or "-",
            ", ".join(record.enabled_products) or "-",
        )
    _print_table(table)


@cli.command()
@_click.argument("source", type=_click.Path(path_type=_pathlib.Path))
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def stage(ctx: _click.Context, source: _pathlib.Path, json_output: bool) -> None:
    """Register a skill and copy it into the canonical store.

    SOURCE is a skill directory, a SKILL.md file, or a skill.json /
    manifest.json file.
    """
    with _reporting_errors(json_output):
        result = _get_manager(ctx).stage(source)

    if json_output:
        _echo_json(result.to_dict())
        return
    for action in result.recovered:
        _click.echo(f"Recovered interrupted staging: {action}")
    _click.echo(f"Staged {result.skill_id} at {result.store_path}")


@cli.command()
@_click.argument("skill_id")
@_click.pass_context
def unstage(ctx: _click.Context, skill_id: str) -> None:
    """Delete a skill's staged files (the registry record is kept)."""
    skill_manager = _get_manager(ctx)
    store_path = skill_manager.paths.store_path(skill_id)
    with _reporting_errors():
        removed = skill_manager.unstage(skill_id)
    if removed:
        _click.echo(f"Unstaged {skill_id} from {store_path}")
    else:
        _click.echo(f"No staged directory found for {skill_id}")


@cli.command()
@_click.argument("skill_id")
@_click.argument("product_id")
@_click.option("--mode", type=_click.Choice(_MODE_CHOICES), default="auto", help="Install mode")
@_click.option("--force", is_flag=True, help="Skip product detection")
@_click.pass_context
def install(ctx: _click.Context, skill_id: str, product_id: str, mode: str, force: bool) -> None:
    """Prepare PRODUCT_ID for a staged skill without placing files."""
    skill_manager = _get_manager(ctx)
    with _reporting_errors():
        chosen = skill_manager.install(skill_id, product_id, mode, force=force)
    requested = models.InstallMode(mode)
    _click.echo(
        f"Installed {skill_id} for {product_id}. "
        f"requestedMode={requested.value} chosenMode={chosen.value} "
        f"stagedPath={skill_manager.paths.store_path(skill_id)}"
    )


@cli.command()
@_click.argument("source_or_id")
@_click.argument("product_id")
@_click.option("--mode", type=_click.Choice(_MODE_CHOICES), default="auto", help="Install mode")
@_click.option("--force", is_flag=True, help="Skip product detection")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def apply(
    ctx: _click.Context,
    source_or_id: str,
    product_id: str,
    mode: str,
    force: bool,
    json_output: bool,
) -> None:
    """Stage (if needed), install and enable a skill on PRODUCT_ID.

    SOURCE_OR_ID is a skill source path or the ID of a registered skill.
    """
    with _reporting_errors(json_output):
        result = _get_manager(ctx).apply(source_or_id, product_id, mode, force=force)

    if json_output:
        _echo_json(result.to_dict())
        return
    _click.echo(
        f"Applied {result.skill_id} to {result.product_id}. "
        f"requestedMode={result.requested_mode.value} chosenMode={result.mode.value} "
        f"stagedPath={result.store_path}"
    )


@cli.command()
@_click.argument("skill_id")
@_click.argument("product_id")
@_click.option("--force", is_flag=True, help="Skip product detection")
@_click.pass_context
def enable(ctx: _click.Context, skill_id: str, product_id: str, force: bool) -> None:
    """Re-enable a skill on a product it is installed on."""
    with _reporting_errors():
        mode = _get_manager(ctx).enable(skill_id, product_id, force=force)
    _click.echo(f"Enabled {skill_id} for {product_id} ({mode.value})")


@cli.command()
@_click.argument("skill_id")
@_click.argument("product_id")
@_click.option("--force", is_flag=True, help="Skip product detection")
@_click.pass_context
def disable(ctx: _click.Context, skill_id: str, product_id: str, force: bool) -> None:
    """Remove a skill's placement but keep it installed."""
    with _reporting_errors():
        _get_manager(ctx).disable(skill_id, product_id, force=force)
    _click.echo(f"Disabled {skill_id} for {product_id}")


@cli.command()
@_click.argument("skill_id")
@_click.argument("product_id")
@_click.option("--force", is_flag=True, help="Skip product detection")
@_click.pass_context
def uninstall(ctx: _click.Context, skill_id: str, product_id: str, force: bool) -> None:
    """Remove a skill from a product. Staged files are kept."""
    skill_manager = _get_manager(ctx)
    with _reporting_errors():
        skill_manager.uninstall(skill_id, product_id, force=force)
    _click.echo(
        f"Uninstalled {skill_id} from {product_id}. "
        f"Staged files kept at {skill_manager.paths.store_path(skill_id)}"
    )


@cli.command()
@_click.argument("skill_id")
@_click.option("--purge", is_flag=True, help="Also delete staged files")
@_click.pass_context
def remove(ctx: _click.Context, skill_id: str, purge: bool) -> None:
    """Delete a skill's registry record."""
    with _reporting_errors():
        _get_manager(ctx).remove(skill_id, purge=purge)
    suffix = " and purged staged files" if purge else ""
    _click.echo(f"Removed skill record {skill_id}{suffix}")


@cli.command()
@_click.argument("skill_id", required=False)
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def status(ctx: _click.Context, skill_id: str | None, json_output: bool) -> None:
    """Show where skills are installed and enabled."""
    with _reporting_errors(json_output):
        statuses = _get_manager(ctx).status(skill_id)

    if json_output:
        _echo_json([s.to_dict() for s in statuses])
        return

    if not statuses:
        _click.echo("No matching skill status found.")
        return

    for skill_status in statuses:
        record = skill_status.record
        _click.echo(f"Skill: {record.id} v{record.manifest.version}")
        _click.echo(f"  Name: {record.manifest.name}")
        _click.echo(f"  Manifest: {record.manifest_path}")
        _click.echo(f"  Staged: {'yes' if skill_status.staged else 'no'}")
        _click.echo(f"  Installed products: {', '.join(record.installed_products)}")
        _click.echo(f"  Enabled products: {', '.join(record.enabled_products)}")
        if record.last_install_mode_by_product:
            pairs = ", ".join(
                f"{product_id}={mode.value}"
                for product_id, mode in sorted(record.last_install_mode_by_product.items())
            )
            _click.echo(f"  Last install modes: {pairs}")
        if record.has_update:
            _click.echo("  Update available")
        for product_id, product_status in skill_status.products.items():
            _click.echo(
                f"  Product status [{product_id}]: "
                f"installed={product_status.is_installed} "
                f"enabled={product_status.is_enabled} "
                f"detail={product_status.detail}"
            )


@cli.command()
@_click.argument("directory", type=_click.Path(path_type=_pathlib.Path))
@_click.argument("product_id")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def acquire(
    ctx: _click.Context,
    directory: _pathlib.Path,
    product_id: str,
    json_output: bool,
) -> None:
    """Take over a skill a product holds as plain files.

    DIRECTORY is the product-side skill directory, or its name inside the
    product's skills directory. The original is moved to the backups
    directory and replaced by a symlink into the store.
    """
    with _reporting_errors(json_output):
        result = _get_manager(ctx).acquire(directory, product_id)

    if json_output:
        _echo_json(result.to_dict())
        return
    _click.echo(f"Acquired {result.skill_id} from {product_id}")
    if result.backup_path is not None:
        _click.echo(f"  Original backed up to {result.backup_path}")
    _click.echo(f"  {result.link_path} -> {result.store_path}")


@cli.command()
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def scan(ctx: _click.Context, json_output: bool) -> None:
    """Find skills in product directories that are not registered."""
    with _reporting_errors(json_output):
        found = _get_manager(ctx).scan_unregistered()

    if json_output:
        _echo_json([item.to_dict() for item in found])
        return

    if not found:
        _click.echo("No unregistered skills found.")
        return

    table = _rich_table.Table(title="Unregistered skills")
    table.add_column("Product", no_wrap=True)
    table.add_column("ID", no_wrap=True)
    table.add_column("Version")
    table.add_column("Directory")
    for item in found:
        table.add_row(
            item.product_id,
            item.candidate.skill_id,
            item.candidate.manifest.version,
            str(item.candidate.directory),
        )
    _print_table(table)


@cli.command()
@_click.option("--limit", type=int, default=20, help="Maximum events to show")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def activity(ctx: _click.Context, limit: int, json_output: bool) -> None:
    """Show recent lifecycle events from the activity log."""
    events = _get_manager(ctx).activity_log(limit)

    if json_output:
        _echo_json(events)
        return

    if not events:
        _click.echo("No activity recorded.")
        return

    for event in events:
        subject = " ".join(
            str(event[key]) for key in ("skill_id", "product_id", "mode") if event.get(key)
        )
        line = f"{event.get('timestamp', '')[:19]}  {event.get('event_type', '?')}"
        if subject:
            line += f"  {subject}"
        if event.get("event_type") == "operation_failed":
            line += f"  {event.get('operation')}: {event.get('error')}"
        _click.echo(line)


# =============================================================================
# Configuration
# =============================================================================


@cli.group()
def config_cmd() -> None:
    """Configuration management commands."""
    pass


# Register config_cmd with the name "config" to avoid shadowing the module
cli.add_command(config_cmd, name="config")


@config_cmd.command(name="show")
@_click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@_click.pass_context
def config_show(ctx: _click.Context, as_json: bool) -> None:
    """Show effective configuration and resolved paths."""
    settings: config.Settings = ctx.obj["settings"]
    paths = settings.resolve_paths()

    data = settings.to_dict()
    data["resolved"] = {
        "user_home": str(paths.user_home),
        "state_file": str(paths.state_file),
        "store_dir": str(paths.store_dir),
        "backups_dir": str(paths.backups_dir),
        "activity_log": str(paths.activity_log),
    }
    unknown_keys = settings.collect_all_extra_fields()
    if unknown_keys:
        data["unknown_keys"] = unknown_keys

    if as_json:
        _echo_json(data)
    else:
        for key in unknown_keys:
            _click.echo(f"Warning: unknown config key '{key}'", err=True)
        _click.echo(_yaml.safe_dump(data, default_flow_style=False, sort_keys=False))


@config_cmd.command(name="path")
@_click.pass_context
def config_path(ctx: _click.Context) -> None:
    """Show configuration and state file paths and whether they exist."""
    settings: config.Settings = ctx.obj["settings"]
    paths = settings.resolve_paths()

    for name, path in [
        ("User config", settings.config_file),
        ("State file", paths.state_file),
        ("Skill store", paths.store_dir),
        ("Activity log", paths.activity_log),
    ]:
        marker = "✓" if path.exists() else "✗"
        _click.echo(f"{marker} {name}: {path}")


@config_cmd.command(name="set-skills-dir")
@_click.argument("product_id")
@_click.argument("path", required=False)
@_click.pass_context
def config_set_skills_dir(ctx: _click.Context, product_id: str, path: str | None) -> None:
    """Override where PRODUCT_ID loads skills from (omit PATH to reset).

    The override is written to the user config file.
    """
    skill_manager = _get_manager(ctx)
    with _reporting_errors():
        skill_manager.adapter(product_id)

    config_file = config.get_user_config_path()
    try:
        data = (config.load_yaml_file(config_file) if config_file.exists() else None) or {}
        products_section = data.setdefault("products", None) or {}
        data["products"] = products_section
        overrides = products_section.setdefault("skills_dir_overrides", None) or {}
        products_section["skills_dir_overrides"] = overrides
        if path:
            overrides[product_id] = str(_pathlib.Path(path).expanduser())
        else:
            overrides.pop(product_id, None)
        config.save_user_config(data, config_file)
    except config.ConfigFileError as e:
        _fail(str(e))

    if path:
        _click.echo(f"Skills directory for {product_id}: {overrides[product_id]}")
    else:
        _click.echo(f"Skills directory for {product_id} reset to default")


@config_cmd.command(name="set-config-path")
@_click.argument("product_id")
@_click.argument("path", required=False)
@_click.pass_context
def config_set_config_path(ctx: _click.Context, product_id: str, path: str | None) -> None:
    """Override the config document patched for PRODUCT_ID (omit PATH to reset).

    The override is stored in the registry.
    """
    with _reporting_errors():
        _get_manager(ctx).set_product_config_path(product_id, path)
    if path:
        _click.echo(f"Config file for {product_id}: {path}")
    else:
        _click.echo(f"Config file for {product_id} reset to default")


def main() -> None:
    """Main entry point with correct program name."""
    cli(prog_name="skillhub")


if __name__ == "__main__":
    main()
