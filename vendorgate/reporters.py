from __future__ import annotations
from .types import AuditReport
from jinja2 import Environment, PackageLoader, select_autoescape
from rich.console import Console
from rich.table import Table
import csv, json, sys

_jinja_env = Environment(loader=PackageLoader("vendorgate", "templates"),
                         autoescape=select_autoescape(["html"]))


def to_human(report: AuditReport, *, stream=None):
    c = Console(file=stream or sys.stdout, highlight=False)
    c.rule("[bold]Compliance Audit Summary")
    result = report.result
    verdict = "[bold green]PASSED[/]" if result.passed else "[bold red]FAILED[/]"
    c.print(f"Company: {report.company_name} • Score: {result.score:.2f}/100 • {verdict} • "
            f"[bold yellow]{len(result.issues)} issues[/], {result.degraded_count} degraded findings")
    if report.summary:
        c.print(report.summary.executive_summary)
    if result.issues:
        t = Table(title="Issues", show_header=True)
        t.add_column("#"); t.add_column("Issue")
        for i, issue in enumerate(result.issues, start=1):
            t.add_row(str(i), issue)
        c.print(t)
    t = Table(title="Findings", show_header=True)
    for col in ("document", "status", "risk", "score", "findings"):
        t.add_column(col)
    for o in result.findings:
        t.add_row(o.document or "", "degraded" if o.degraded else "confident",
                  o.finding.risk_level, f"{o.finding.score:g}", "; ".join(o.finding.findings))
    c.print(t)
    for title, items in (("Required actions", report.required_actions),
                         ("Recommendations", report.recommendations)):
        if items:
            c.print(f"[bold]{title}[/]")
            for item in items:
                c.print(f"  • {item}")


def to_json(report: AuditReport) -> str:
    return json.dumps(report.to_record(), indent=2)


def to_csv(report: AuditReport, *, path: str):
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["document", "status", "risk_level", "score", "findings", "recommendations"])
        for o in report.result.findings:
            w.writerow([o.document or "", "degraded" if o.degraded else "confident",
                        o.finding.risk_level, o.finding.score,
                        " | ".join(o.finding.findings), " | ".join(o.finding.recommendations)])


def to_html(report: AuditReport) -> str:
    template = _jinja_env.get_template("audit_report.html")
    return template.render(report=report, result=report.result, summary=report.summary)
