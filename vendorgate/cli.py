#!/usr/bin/env python3
"""
VendorGate CLI - Entry point for the vendorgate command
"""

import asyncio
import logging
import os
import sys
import uuid

import click
import pathlib
from dateutil.parser import parse as parse_date

from .analyzer import DocumentAnalyzer
from .backends import MemoryBlobStore, MemoryDocumentStore
from .config import Settings
from .detectors import classify_filename
from .errors import ConfigurationError
from .gemini import GeminiClient
from .intake import DocumentIntake
from .pipeline import CompliancePipeline
from .report import ReportGenerator
from .reporters import to_csv, to_html, to_human, to_json
from .scoring import ScoreAggregator
from .types import DocumentCategory, DocumentUpload

CATEGORY_CHOICES = [c.value for c in DocumentCategory]


def build_pipeline(settings, model=None):
    """Wire a pipeline over in-memory storage."""
    model = model or GeminiClient(settings)
    store = MemoryDocumentStore()
    return CompliancePipeline(
        intake=DocumentIntake(MemoryBlobStore(), store),
        analyzer=DocumentAnalyzer(model),
        aggregator=ScoreAggregator(settings),
        reports=ReportGenerator(model, store),
    )


@click.group()
@click.option("--log-level", default=lambda: os.getenv("LOG_LEVEL", "WARNING"), show_default="WARNING")
def main(log_level):
    """Score vendor/client compliance documents."""
    logging.basicConfig(level=log_level.upper(),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@main.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--category", "categories", multiple=True, type=click.Choice(CATEGORY_CHOICES),
              help="Category for each file, in the same order; inferred from the filename when omitted")
@click.option("--company", default="Organization", help="Company name used in the audit summary")
@click.option("--format", "fmt", type=click.Choice(["human", "json", "csv", "html"]), default="human")
@click.option("--out", "out", type=click.Path(dir_okay=False), help="when --format=csv or html write the report to this file")
@click.option("--uploaded", default=None, help="Upload date to stamp on the documents (defaults to now)")
@click.option("--averaging", type=click.Choice(["sequential", "mean"]), default=None)
def score(paths, categories, company, fmt, out, uploaded, averaging):
    """Score compliance documents and print the audit report."""
    if len(categories) > len(paths):
        raise click.BadParameter("more --category values than files", param_hint="--category")

    settings = Settings.from_env()
    if averaging:
        settings.averaging = averaging

    uploads = []
    for i, path in enumerate(paths):
        path = pathlib.Path(path)
        category = DocumentCategory(categories[i]) if i < len(categories) else None
        uploads.append(DocumentUpload(filename=path.name, content=path.read_bytes(), category=category))

    uploaded_at = parse_date(uploaded) if uploaded else None
    pipeline = build_pipeline(settings)
    try:
        run = asyncio.run(pipeline.run(f"cli_{uuid.uuid4().hex[:8]}", uploads, company,
                                       uploaded_at=uploaded_at))
    except ConfigurationError as e:
        raise click.ClickException(str(e))

    report = run.report
    if fmt == "human":
        to_human(report)
    elif fmt == "json":
        print(to_json(report))
    elif fmt == "csv":
        out = out or "audit_report.csv"
        to_csv(report, path=out)
        print(f"Report written to {out}")
    else:
        html = to_html(report)
        if out:
            pathlib.Path(out).write_text(html, encoding="utf-8")
            print(f"Report written to {out}")
        else:
            print(html)

    # Exit with appropriate status
    sys.exit(0 if run.result.passed else 2)


@main.command()
@click.argument("paths", nargs=-1, required=True)
def categorize(paths):
    """Print the category inferred from each filename."""
    for path in paths:
        print(f"{classify_filename(path).value}\t{path}")


if __name__ == "__main__":
    main()
