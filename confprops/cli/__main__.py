from __future__ import annotations

import json
from pathlib import Path
from typing import List, NoReturn, Optional

import typer

from ..core.declaration import declare
from ..core.declaration_cache import CachePolicy
from ..core.decoders import decoder_for
from ..core.errors import ConfpropsError
from ..core.loader import CONFIG_FILE_NAME, ConfigLoader
from ..core.resource_cache import ResourceCache
from ..core.source import ENV_SOURCE_ID, SYSTEM_SOURCE_ID, SourceKind, SourceReader
from ..logging import FORMAT_ENV, LEVEL_ENV, setup_logging
from ..sources.environ import EnvironmentSource
from ..sources.properties_file import PropertiesFileSource
from ..sources.system import SystemPropertiesSource, system_properties

app = typer.Typer(help="Confprops CLI")

_SOURCE_IDS = {SourceKind.SYSTEM: SYSTEM_SOURCE_ID, SourceKind.ENV: ENV_SOURCE_ID}


def _fail(message: str) -> NoReturn:
    typer.echo(message, err=True)
    raise typer.Exit(code=1)


def _kind(value: str) -> SourceKind:
    try:
        return SourceKind(value)
    except ValueError:
        raise typer.BadParameter(
            f"must be one of: {', '.join(k.value for k in SourceKind)}",
            param_hint="--kind",
        ) from None


def _reader(
    kind: SourceKind, paths: Optional[List[Path]], defines: Optional[List[str]]
) -> SourceReader:
    if kind is SourceKind.FILE:
        return PropertiesFileSource(paths or None)
    if kind is SourceKind.ENV:
        return EnvironmentSource()
    props = system_properties()
    for item in defines or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise typer.BadParameter(
                f"expected key=value, got {item!r}", param_hint="--define"
            )
        props.set(key, value)
    return SystemPropertiesSource(props)


def _source_id(kind: SourceKind, source: Optional[str]) -> str:
    if source:
        return source
    if kind is SourceKind.FILE:
        raise typer.BadParameter("a file source is required", param_hint="--source")
    return _SOURCE_IDS[kind]


@app.callback()
def main(
    log_level: str = typer.Option("WARNING", "--log-level", envvar=LEVEL_ENV),
    log_format: str = typer.Option("console", "--log-format", envvar=FORMAT_ENV),
):
    setup_logging(log_level, log_format)


@app.command()
def get(
    key: str,
    source: Optional[str] = typer.Option(None, "--source", "-s"),
    kind: str = typer.Option("file", "--kind"),
    type_: str = typer.Option("string", "--type", help="e.g. integer, string-list, boolean-map"),
    delimiter: Optional[str] = typer.Option(None, "--delimiter"),
    path: Optional[List[Path]] = typer.Option(None, "--path", "-p"),
    define: Optional[List[str]] = typer.Option(None, "--define", "-D"),
    default: Optional[str] = typer.Option(None, "--default"),
):
    source_kind = _kind(kind)
    source_id = _source_id(source_kind, source)
    try:
        decoder = decoder_for(type_, delimiter)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--type") from e
    declaration = declare(
        source_id,
        key,
        default,
        decoder,
        policy=CachePolicy.NO_CACHE,
        reader=_reader(source_kind, path, define),
        resources=ResourceCache(),
    )
    try:
        value = declaration.get()
    except ConfpropsError as e:
        _fail(str(e))
    typer.echo(json.dumps({"source": source_id, "key": key, "value": value}, indent=2))


@app.command()
def dump(
    source: Optional[str] = typer.Argument(None),
    kind: str = typer.Option("file", "--kind"),
    path: Optional[List[Path]] = typer.Option(None, "--path", "-p"),
    define: Optional[List[str]] = typer.Option(None, "--define", "-D"),
):
    source_kind = _kind(kind)
    source_id = _source_id(source_kind, source)
    reader = _reader(source_kind, path, define)
    try:
        mapping = ResourceCache().fetch(source_id, reader)
    except ConfpropsError as e:
        _fail(str(e))
    typer.echo(json.dumps(dict(mapping), indent=2, sort_keys=True))


@app.command()
def declarations(
    config: Optional[Path] = typer.Option(None, "--config", "-c"),
):
    loader = ConfigLoader(config)
    if loader.config_path is None:
        _fail(f"No {CONFIG_FILE_NAME} found")
    try:
        declared = loader.load_declarations(resources=ResourceCache())
    except ValueError as e:
        _fail(str(e))
    values = {}
    for name, declaration in declared.items():
        try:
            values[name] = declaration.get()
        except ConfpropsError as e:
            _fail(f"{name}: {e}")
    typer.echo(json.dumps(values, indent=2, default=str))


if __name__ == "__main__":
    app()
