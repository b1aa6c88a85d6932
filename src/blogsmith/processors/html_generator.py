"""
HTML index generation for a collection of posts.
"""

import datetime
import html
import logging
import re
import shutil
from pathlib import Path
from string import Template
from typing import Dict, List, Optional, Sequence

from ..core.models import Post
from ..core.paths import get_system_path, resolve_data_path
from ..core.text_utils import excerpt

CUSTOM_TEMPLATE_MARKER = "blogsmith:custom-template"
CONTENT_PLACEHOLDER = "<!-- CONTENT_PLACEHOLDER -->"
UNTAGGED = "Untagged"

_PLACEHOLDER = re.compile(r"%\{(title|date|content)\}")

logger = logging.getLogger(__name__)

_BASIC_TEMPLATE = (
    "<!DOCTYPE html>\n"
    "<html>\n"
    "<head>\n"
    "<meta charset=\"UTF-8\">\n"
    "<title>%{title}</title>\n"
    "<style>\n"
    "    body { font-family: Arial, sans-serif; margin: 20px; }\n"
    "    .post { margin-bottom: 20px; }\n"
    "    .tag { background: #eef; border-radius: 3px; padding: 0 4px; margin-right: 4px; }\n"
    "    .post-stats { color: #555; font-size: 0.9em; }\n"
    "    .no-entries { font-style: italic; color: #555; }\n"
    "</style>\n"
    "</head>\n"
    "<body>\n"
    "<header>\n"
    "<h1>%{title}</h1>\n"
    "<p class=\"generated\">Generated on %{date}</p>\n"
    "</header>\n"
    "<hr>\n"
    "%{content}\n"
    "</body>\n"
    "</html>\n"
)

_POST_TEMPLATE = Template(
    '<div class="post">\n'
    '  <h3><a href="$href">$title</a></h3>\n'
    '$subtitle'
    '  <p class="post-meta">$date$author</p>\n'
    '  <p class="post-tags">$tags</p>\n'
    '  <p class="post-excerpt">$excerpt</p>\n'
    '  <p class="post-stats">$stats</p>\n'
    '</div>'
)


def post_href(post: Post) -> str:
    """Public URL of a post: its permalink, else the Jekyll ``/:year/:month/:day/:title.html`` default."""
    permalink = post.front_matter.extra.get('permalink')
    if isinstance(permalink, str) and permalink.strip():
        return permalink.strip()
    if post.date:
        return f"/{post.date:%Y/%m/%d}/{post.slug}.html"
    return f"{post.slug}.html"


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" + ("" if count == 1 else "s")


class HTMLGenerator:
    """Generates an HTML index page for posts."""

    def __init__(self, template_path: str = "index_template.html"):
        """Template names resolve against the data dir, then the bundled templates."""
        self.template_path = template_path

    def render_post(self, post: Post) -> str:
        fm = post.front_matter
        subtitle = ''
        if isinstance(fm.subtitle, str) and fm.subtitle.strip():
            subtitle = f'  <p class="post-subtitle">{html.escape(fm.subtitle)}</p>\n'
        author = ''
        if isinstance(fm.author, str) and fm.author.strip():
            author = f' by {html.escape(fm.author)}'
        tags = ''.join(f'<span class="tag">{html.escape(tag)}</span>' for tag in fm.tag_list())
        stats = ', '.join([
            _plural(len(post.code_blocks), 'code block'),
            _plural(len(post.math_blocks), 'equation'),
            _plural(len(post.images), 'image'),
        ])
        return _POST_TEMPLATE.substitute(
            href=html.escape(post_href(post), quote=True),
            title=html.escape(post.title),
            subtitle=subtitle,
            date=post.date.isoformat() if post.date else 'Undated',
            author=author,
            tags=tags,
            excerpt=html.escape(excerpt(post.body)),
            stats=stats,
        )

    def group_posts(self, posts: Sequence[Post], group_by: str = 'date') -> Dict[str, List[Post]]:
        """Group posts under headings: years (newest first) or tags (alphabetical)."""
        ordered = sorted(posts, key=lambda p: (p.date or datetime.date.min, p.slug), reverse=True)
        groups: Dict[str, List[Post]] = {}
        if group_by == 'date':
            for post in ordered:
                key = str(post.date.year) if post.date else 'Undated'
                groups.setdefault(key, []).append(post)
            return groups
        if group_by == 'tag':
            for post in ordered:
                for tag in dict.fromkeys(post.front_matter.tag_list()) or [UNTAGGED]:
                    groups.setdefault(tag, []).append(post)
            return {key: groups[key] for key in sorted(groups, key=lambda k: (k == UNTAGGED, k.lower()))}
        raise ValueError(f"group_by must be 'date' or 'tag', got {group_by!r}")

    def generate_index(
        self,
        posts: Sequence[Post],
        output_path: str,
        title: Optional[str] = None,
        group_by: str = 'date',
    ) -> None:
        """Write the post index to *output_path*."""
        groups = self.group_posts(posts, group_by)

        parts: List[str] = []
        if not posts:
            parts.append('<p class="no-entries">No posts found.</p>')
        else:
            parts.append(f'<div class="entry-count">{_plural(len(posts), "post")}</div>')
            for heading, group in groups.items():
                parts.append(f'<h2>{html.escape(heading)}</h2>')
                parts.extend(self.render_post(post) for post in group)

        rendered = self._render_page(title or 'Posts').replace(CONTENT_PLACEHOLDER, '\n'.join(parts))

        target = Path(output_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(rendered, encoding='utf-8')
        logger.info(f"Generated post index with {len(posts)} post(s): {target}")

    def _render_page(self, title_text: str) -> str:
        template_path = self._ensure_template_available(Path(self.template_path))
        template = template_path.read_text(encoding='utf-8')
        values = {
            'title': html.escape(title_text),
            'date': html.escape(str(datetime.date.today())),
            'content': CONTENT_PLACEHOLDER,
        }
        # One pass, so placeholders inside the title stay literal
        rendered = _PLACEHOLDER.sub(lambda m: values[m.group(1)], template)
        if CONTENT_PLACEHOLDER not in rendered:
            # Templates without a content slot get the posts before </body>
            end = rendered.rfind('</body>')
            if end == -1:
                end = len(rendered)
            rendered = rendered[:end] + CONTENT_PLACEHOLDER + rendered[end:]
        return rendered

    def _ensure_template_available(self, template_path: Path) -> Path:
        """
        Ensure a template is present in the runtime data directory.

        If a system template exists and the runtime copy differs, overwrite it unless the
        runtime template carries the custom-template marker comment.
        """
        if template_path.is_absolute():
            if template_path.exists():
                return template_path
            return self._ensure_template_available(Path(template_path.name))

        data_template = resolve_data_path('templates', *template_path.parts)
        system_template = get_system_path('templates', *template_path.parts)

        if system_template.exists():
            data_template.parent.mkdir(parents=True, exist_ok=True)

            if data_template.exists():
                try:
                    if CUSTOM_TEMPLATE_MARKER in data_template.read_text(encoding='utf-8'):
                        logger.debug("Skipping template refresh for %s (custom marker present)", data_template)
                        return data_template
                except (OSError, UnicodeDecodeError):
                    pass

            needs_copy = True
            if data_template.exists():
                try:
                    needs_copy = data_template.read_bytes() != system_template.read_bytes()
                except OSError:
                    needs_copy = True

            if needs_copy:
                shutil.copyfile(system_template, data_template)
                logger.info("Refreshed HTML template %s from system copy", data_template.name)

            return data_template

        if not data_template.exists():
            data_template.parent.mkdir(parents=True, exist_ok=True)
            data_template.write_text(_BASIC_TEMPLATE, encoding='utf-8')
        return data_template
