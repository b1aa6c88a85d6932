"""
Inspect command: show what was parsed out of a single post.
"""

import logging
from typing import Any, Dict

from ..processors.post_loader import load_post

logger = logging.getLogger(__name__)


def run(path: str) -> Dict[str, Any]:
    """Parse *path* and return its JSON-friendly description.

    The config is not needed; inspection reports only what is in the file.
    """
    post = load_post(path)
    data = post.to_dict()
    data["counts"] = {
        "code_blocks": len(post.code_blocks),
        "math_blocks": len(post.math_blocks),
        "images": len(post.images),
        "links": len(post.links),
        "headings": len(post.headings),
    }
    data["languages"] = sorted({block.language for block in post.code_blocks if block.language})
    logger.debug("Inspected %s", path)
    return data


def format_summary(data: Dict[str, Any]) -> str:
    """Human readable rendering of :func:`run` output."""
    lines = [f"Post: {data['path']}"]
    if data.get('date'):
        lines.append(f"Date: {data['date']}")
    lines.append(f"Slug: {data['slug']}")

    front_matter = data.get('front_matter') or {}
    if front_matter:
        lines.append("Front matter:")
        for key, value in front_matter.items():
            lines.append(f"  {key}: {value}")
    else:
        lines.append("Front matter: (none)")

    counts = data['counts']
    lines.append(
        "Body: {code_blocks} code block(s), {math_blocks} math block(s), "
        "{images} image(s), {links} link(s), {headings} heading(s)".format(**counts)
    )
    if data['languages']:
        lines.append(f"Code languages: {', '.join(data['languages'])}")
    for issue in data.get('issues', []):
        lines.append(f"Issue: {issue['severity']}: {issue['message']} [{issue['code']}]")
    return "\n".join(lines)
