import json
import logging
import sys
from pathlib import Path

import click

from .pipeline import AtomicWriter, FileNamingStrategy, GenerationError, GeneratorConfig, PipelineGenerator
from .pipeline.codec import PayloadCodec

logger = logging.getLogger(__name__)


def load_schemas(paths):
    """Merge the ``types`` of several schema files into one document."""
    merged = {"types": []}
    for path in paths:
        with open(path) as f:
            try:
                schema = json.load(f)
            except json.JSONDecodeError as e:
                raise click.ClickException(f"{path}: invalid JSON: {e}") from e
        if not isinstance(schema, dict):
            raise click.ClickException(f"{path}: a schema must be a JSON object")
        types = schema.get("types", [])
        if not isinstance(types, list):
            raise click.ClickException(f"{path}: 'types' must be a list")
        merged["types"].extend(types)
        for key in ("codecNamespace", "fullCodec"):
            if key not in schema:
                continue
            if key in merged and merged[key] != schema[key]:
                logger.warning("%s: ignoring %s '%s', already set to '%s'", path, key, schema[key], merged[key])
                continue
            merged[key] = schema[key]
    return merged


def parse_sample(value):
    type_name, sep, path = value.partition("=")
    if not sep or not type_name or not path:
        raise click.BadParameter(f"expected TYPE=FILE, got '{value}'", param_hint="--sample")
    if not Path(path).is_file():
        raise click.BadParameter(f"no such file '{path}'", param_hint="--sample")
    return type_name, Path(path)


@click.command()
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option("--output", "-o", default=None, type=click.Path(file_okay=False, resolve_path=True))
@click.option("--source-dir", default=None, type=click.Path(exists=True, file_okay=False, resolve_path=True))
@click.option("--naming", default=None, type=click.Choice([s.value for s in FileNamingStrategy]))
@click.option("--seal-interfaces", is_flag=True, default=False, help="Render root interfaces sealed (Scala only)")
@click.option("--codec-namespace", default=None, type=str)
@click.option("--full-codec", default=None, type=str, help="Name of the aggregate codec")
@click.option("--no-codecs", is_flag=True, default=False, help="Skip JSON codec generation")
@click.option("--sample", "samples", multiple=True, metavar="TYPE=FILE", help="Check a JSON payload against a type")
@click.option("--verbose", "-v", is_flag=True, default=False)
@click.argument("paths", nargs=-1, type=click.Path(exists=True, dir_okay=False, resolve_path=True))
def datatype_to_code(config, output, source_dir, naming, seal_interfaces, codec_namespace, full_codec, no_codecs, samples, verbose, paths):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if config is not None:
        with open(config) as f:
            config = GeneratorConfig.from_dict(json.load(f))
    else:
        config = GeneratorConfig()

    # CLI flags override the config file
    if output is not None:
        config.output_dir = output
    if source_dir is not None:
        config.source_dir = source_dir
    if naming is not None:
        config.file_naming_strategy = FileNamingStrategy(naming)
    if seal_interfaces:
        config.seal_interfaces = True
    if codec_namespace is not None:
        config.codec_namespace = codec_namespace
    if full_codec is not None:
        config.full_codec_name = full_codec
    if no_codecs:
        config.generate_codecs = False

    samples = [parse_sample(s) for s in samples]

    if not paths:
        if not config.source_dir:
            raise click.UsageError("Give schema files or a source directory")
        paths = sorted(str(p) for p in Path(config.source_dir).glob("*.json"))
        if not paths:
            raise click.UsageError(f"No *.json schema found in {config.source_dir}")

    schema = load_schemas(paths)
    codegen = PipelineGenerator(schema, config)
    try:
        result = codegen.generate()

        checker = PayloadCodec(codegen.model)
        for type_name, sample_path in samples:
            checker.decode_json(sample_path.read_text(encoding="utf-8"), type_name)
            logger.info("%s matches %s", sample_path, type_name)

        AtomicWriter().write_all(Path(config.output_dir), result.files)
    except GenerationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
