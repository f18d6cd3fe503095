import click
from decktool.cli_utils import standard_command
from decktool.config import load_config, resolve_config
import json


@click.group("config")
def config_cmd():
    """Configuration management commands."""
    pass


@config_cmd.command("show")
@click.option("--pretty", is_flag=True, help="Display as formatted JSON instead of single-line JSON")
@click.option("--path", is_flag=True, help="Show the config file path being used")
@click.option("--raw", is_flag=True, help="Show the merged settings before resolution")
@standard_command
def show_config(pretty, path, raw):
    """Show the current configuration with all overrides applied.

    By default, outputs single-line JSON.
    Use --pretty for human-readable formatted output.
    Use --path to see which config file is being used.
    """
    from decktool.config import get_config_path

    if path:
        config_path = get_config_path()
        print(json.dumps({"config_path": str(config_path), "exists": config_path.exists()}))
        return

    if raw:
        config = load_config()
    else:
        config = resolve_config(resolve_bin_dir=False).to_dict()

    if pretty:
        # Pretty print for human readability
        print(json.dumps(config, indent=2, ensure_ascii=False))
    else:
        print(json.dumps(config, ensure_ascii=False))
