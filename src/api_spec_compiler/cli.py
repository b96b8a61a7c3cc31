"""CLI entry point for api-spec-compiler."""

import json
from pathlib import Path

import click
import yaml
from pydantic import BaseModel

from api_spec_compiler.compiler import ApiConfigCompiler
from api_spec_compiler.config import ConfigError, Settings, load_config
from api_spec_compiler.sql.parameterizer import parameterize
from api_spec_compiler.sql.splitter import split
from api_spec_compiler.store import ApiConfigSaver, MemoryRecordStore

FORMAT_OPTION = click.option(
    "--format", "fmt", default="json", type=click.Choice(["json", "yaml"]), help="Output format."
)
CONFIG_OPTION = click.option(
    "--config", "config_path", default=None, type=click.Path(exists=True, path_type=Path), help="YAML settings file."
)


def _load_settings(config_path: Path | None) -> Settings:
    if config_path is None:
        return Settings()
    try:
        return load_config(config_path)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e


def _render(data: BaseModel | list | dict, fmt: str) -> str:
    if isinstance(data, BaseModel):
        data = data.model_dump()
    if fmt == "yaml":
        return yaml.safe_dump(data, allow_unicode=True, sort_keys=False)
    return json.dumps(data, ensure_ascii=False, indent=2) + "\n"


@click.group()
def main():
    """API Spec Compiler — turn API requirement descriptions into API definition records."""
    pass


@main.command(name="compile")
@click.argument("doc_path", type=click.Path(exists=True, path_type=Path))
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output file for the compiled record.")
@CONFIG_OPTION
@click.option("--records", "records_path", default=None, type=click.Path(path_type=Path), help="Also write the metadata-store records to this file.")
@click.option("--partition", default="default", help="Partition id attached to store records.")
@FORMAT_OPTION
def compile_cmd(doc_path: Path, output: Path, config_path: Path | None, records_path: Path | None, partition: str, fmt: str):
    """Compile a requirement description into an API definition record."""
    settings = _load_settings(config_path)

    click.echo(f"Compiling {doc_path}...")
    text = doc_path.read_text(encoding="utf-8")
    config = ApiConfigCompiler(settings.compiler).compile(text)
    click.echo(
        f"{config.http_method} {config.route_path}: {len(config.parameters)} parameters, "
        f"{len(config.conditions)} conditions, {len(config.columns)} columns."
    )
    for warning in config.warnings:
        click.echo(f"  Warning: {warning}")

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(_render(config, fmt), encoding="utf-8")
    click.echo(f"API definition saved to {output}")

    if records_path is not None:
        store = MemoryRecordStore()
        ApiConfigSaver(store, partition, settings.categories).save(config)
        records_path.parent.mkdir(parents=True, exist_ok=True)
        records_path.write_text(_render(store.records, fmt), encoding="utf-8")
        click.echo(f"{len(store.records)} store records saved to {records_path}")


@main.command(name="parameterize")
@click.argument("sql")
@CONFIG_OPTION
@FORMAT_OPTION
def parameterize_cmd(sql: str, config_path: Path | None, fmt: str):
    """Replace the literal values of a sample SQL with #{name} placeholders."""
    settings = _load_settings(config_path)
    click.echo(_render(parameterize(sql, config=settings.compiler), fmt), nl=False)


@main.command(name="split")
@click.argument("sql")
@FORMAT_OPTION
def split_cmd(sql: str, fmt: str):
    """Split a parameterized SQL into main SQL, conditions and ORDER BY."""
    click.echo(_render(split(sql), fmt), nl=False)
