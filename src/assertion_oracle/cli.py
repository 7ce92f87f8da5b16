from __future__ import annotations

from pathlib import Path

import typer

app = typer.Typer(
    name="assertion-oracle", help="Evaluate SDK assertions from an event log"
)


@app.command()
def evaluate(
    input_file: str = typer.Argument(help="Path to the JSON-lines event log"),
    output_file: str = typer.Argument(help="Path to write verdicts (JSON lines)"),
    config: str | None = typer.Option(None, help="Path to oracle YAML config"),
    junit: str | None = typer.Option(None, help="Also write a JUnit XML file"),
    report: str | None = typer.Option(None, help="Also write an HTML report"),
    missing_declaration: str | None = typer.Option(
        None,
        "--missing-declaration",
        help="How to handle undeclared assertion ids: fail or report",
    ),
    debug_log: str | None = typer.Option(None, help="Write debug output to this file"),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output to terminal"
    ),
):
    """Evaluate every assertion in an event log and write one verdict per id."""
    import yaml

    from assertion_oracle.config import OracleConfig, load_config
    from assertion_oracle.errors import OracleError
    from assertion_oracle.oracle import Oracle
    from assertion_oracle.verbose import setup_logger

    input_path = Path(input_file)
    if not input_path.exists():
        typer.echo(f"Error: input file not found: {input_file}", err=True)
        raise typer.Exit(1)

    try:
        if config is not None:
            config_path = Path(config)
            if not config_path.exists():
                typer.echo(f"Error: config file not found: {config}", err=True)
                raise typer.Exit(1)
            oracle_config = load_config(config_path)
        else:
            oracle_config = OracleConfig()

        # Command-line options take precedence over the config file
        overrides = {
            key: value
            for key, value in (
                ("junit", junit),
                ("report", report),
                ("missing_declaration", missing_declaration),
            )
            if value is not None
        }
        if overrides:
            oracle_config = OracleConfig(
                **{**oracle_config.model_dump(mode="json"), **overrides}
            )
    except (ValueError, yaml.YAMLError) as e:
        typer.echo(f"Error: invalid config: {e}", err=True)
        raise typer.Exit(1)

    logger = setup_logger(
        Path(debug_log) if debug_log else None,
        verbose=verbose,
        logger_name="assertion_oracle_cli",
    )
    oracle = Oracle(config=oracle_config, logger=logger)

    try:
        result = oracle.execute(input_path, Path(output_file))
    except OracleError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    metrics = result.metrics
    typer.echo(
        f"{metrics['assertion_count']} assertion(s): "
        f"{metrics['assertion_pass_count']} passed, "
        f"{metrics['assertion_fail_count']} failed"
    )
    for verdict in result.evaluation.verdicts:
        if not verdict.passed:
            typer.echo(f"  FAIL  {verdict.id}  {verdict.message}")
    for exc in result.evaluation.errors:
        typer.echo(f"  ERROR {exc}", err=True)

    typer.echo(f"Verdicts: {result.output_path}")
    if result.junit_path is not None:
        typer.echo(f"JUnit: {result.junit_path}")
    if result.report_path is not None:
        typer.echo(f"Report: {result.report_path}")

    if result.evaluation.errors:
        raise typer.Exit(1)
    if oracle_config.fail_on_failed and not result.all_passed:
        raise typer.Exit(1)


@app.command()
def report(
    junit_file: str = typer.Argument(help="Path to a junit.xml written by evaluate"),
    out: str | None = typer.Option(
        None, help="Output path for the HTML report (defaults to report.html beside it)"
    ),
):
    """Regenerate the HTML report from a JUnit XML file."""
    from assertion_oracle.reporting.junit import generate_report

    junit_path = Path(junit_file)
    if not junit_path.exists():
        typer.echo(f"Error: JUnit file not found: {junit_file}", err=True)
        raise typer.Exit(1)

    report_path = generate_report(junit_path, Path(out) if out else None)
    typer.echo(f"Report generated: {report_path}")


@app.command()
def schema(
    kind: str = typer.Option("input", help="Which format: input or output"),
    out: str | None = typer.Option(
        None, help="Output path (defaults to schemas/<kind>.schema.json)"
    ),
):
    """Write JSON Schema for the event log or the verdict format."""
    from assertion_oracle.schema import write_json_schema

    if kind not in ("input", "output"):
        typer.echo(
            f"Error: unsupported schema kind '{kind}'. Supported values: input, output",
            err=True,
        )
        raise typer.Exit(1)

    out_path = Path(out) if out is not None else Path("schemas") / f"{kind}.schema.json"
    write_json_schema(out_path, kind)  # type: ignore[arg-type]
    typer.echo(f"Wrote schema: {out_path}")
