"""Rendering of the paginated rule listing."""

from lss.core.models import RulePage


def format_rule_page(page: RulePage) -> str:
    """Render a page as ``name :: pattern [tags] conf=N`` lines plus a range footer."""
    lines = [
        f"{rule.name} :: {rule.pattern} [{','.join(rule.tags)}] conf={rule.confidence}"
        for rule in page.rules
    ]
    if not page.rules:
        lines.append(f"Showing 0 of {page.total}")
        return "\n".join(lines)
    start = (max(page.page, 1) - 1) * page.per_page
    lines.append(f"Showing {start + 1}-{start + len(page.rules)} of {page.total}")
    return "\n".join(lines)


def format_rule_page_json(page: RulePage) -> str:
    """Render a page as ``{"total", "page", "per_page", "rules"}`` JSON."""
    return page.model_dump_json(indent=2)
