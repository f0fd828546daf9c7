"""
Read-only DOM snapshot used by the heuristic checks.

A snapshot can come from a live Playwright page (a single page.evaluate
round trip) or from static HTML parsed with BeautifulSoup. Both paths
produce the same payload shape so the checks never see the difference.
"""
from dataclasses import dataclass, field
from typing import Optional, Tuple

from bs4 import BeautifulSoup

HEADING_SELECTOR = "h1, h2, h3, h4, h5, h6"
FOCUSABLE_SELECTOR = 'a[href], button, input, select, textarea, [tabindex]:not([tabindex="-1"])'
LANDMARK_SELECTOR = (
    'main, [role="main"], nav, [role="navigation"], '
    'header, [role="banner"], footer, [role="contentinfo"]'
)
SKIP_LINK_SELECTOR = 'a[href="#main"], a[href="#content"]'
LIVE_REGION_SELECTOR = '[role="alert"], [aria-live="polite"], [aria-live="assertive"]'
FORM_FIELD_SELECTOR = "input, select, textarea"
CONTROL_SELECTOR = "button, a[href]"
ANIMATED_SELECTOR = '[style*="animation"], [style*="transition"]'

SELECTORS = {
    "headings": HEADING_SELECTOR,
    "landmarks": LANDMARK_SELECTOR,
    "skipLinks": SKIP_LINK_SELECTOR,
    "liveRegions": LIVE_REGION_SELECTOR,
    "fields": FORM_FIELD_SELECTOR,
    "controls": CONTROL_SELECTOR,
    "animated": ANIMATED_SELECTOR,
}

SNAPSHOT_JS = """
(sel) => {
  const count = (s) => document.querySelectorAll(s).length;
  const attr = (el, name) => el.hasAttribute(name) ? el.getAttribute(name) : null;
  const all = (s) => Array.from(document.querySelectorAll(s));
  const labelled = new Set(all('label[for]').map(l => l.getAttribute('for')));
  const viewport = document.querySelector('meta[name="viewport"]');
  return {
    title: document.title || '',
    lang: attr(document.documentElement, 'lang'),
    viewport: viewport ? viewport.getAttribute('content') : null,
    headings: all(sel.headings).map(h => parseInt(h.tagName.charAt(1), 10)),
    images: all('img').map(img => ({
      src: attr(img, 'src'), alt: attr(img, 'alt'), role: attr(img, 'role'), loading: attr(img, 'loading'),
    })),
    roles: all('[role]').map(el => el.getAttribute('role')),
    landmarks: count(sel.landmarks),
    skipLinks: count(sel.skipLinks),
    liveRegions: count(sel.liveRegions),
    fields: all(sel.fields).map(el => ({
      tag: el.tagName.toLowerCase(),
      type: (attr(el, 'type') || '').toLowerCase(),
      id: attr(el, 'id'),
      name: attr(el, 'name'),
      ariaLabel: !!(el.getAttribute('aria-label') || '').trim(),
      ariaLabelledby: !!(el.getAttribute('aria-labelledby') || '').trim(),
      label: (!!el.id && labelled.has(el.id)) || !!el.closest('label'),
    })),
    controls: all(sel.controls).map(el => ({
      tag: el.tagName.toLowerCase(),
      id: attr(el, 'id'),
      href: attr(el, 'href'),
      text: (el.textContent || '').trim(),
      ariaLabel: !!(el.getAttribute('aria-label') || '').trim(),
      ariaLabelledby: !!(el.getAttribute('aria-labelledby') || '').trim(),
    })),
    animatedStyles: all(sel.animated).map(el => el.getAttribute('style')),
    links: count('a[href]'),
    buttons: count('button'),
    inputs: count('input, select, textarea'),
  };
}
"""


@dataclass(frozen=True)
class ImageInfo:
    src: Optional[str] = None
    alt: Optional[str] = None
    role: Optional[str] = None
    loading: Optional[str] = None


@dataclass(frozen=True)
class Control:
    tag: str
    id: Optional[str] = None
    href: Optional[str] = None
    text: str = ""
    has_aria_label: bool = False
    has_aria_labelledby: bool = False

    @property
    def display_name(self):
        if self.id:
            return f"{self.tag}#{self.id}"
        return f"{self.tag}[href=\"{self.href}\"]" if self.href else self.tag


@dataclass(frozen=True)
class FormField:
    tag: str
    type: str = ""
    id: Optional[str] = None
    name: Optional[str] = None
    has_aria_label: bool = False
    has_aria_labelledby: bool = False
    has_label: bool = False

    @property
    def display_name(self):
        ident = self.id or self.name
        return f"{self.tag}#{ident}" if ident else self.tag


@dataclass(frozen=True)
class DomSnapshot:
    title: str = ""
    lang: Optional[str] = None
    viewport: Optional[str] = None
    heading_levels: Tuple[int, ...] = ()
    images: Tuple[ImageInfo, ...] = ()
    roles: Tuple[str, ...] = ()
    landmark_count: int = 0
    skip_link_count: int = 0
    live_region_count: int = 0
    form_fields: Tuple[FormField, ...] = field(default_factory=tuple)
    controls: Tuple[Control, ...] = ()
    animated_styles: Tuple[str, ...] = ()
    links: int = 0
    buttons: int = 0
    inputs: int = 0


def snapshot_from_payload(data: dict) -> DomSnapshot:
    return DomSnapshot(
        title=data.get("title") or "",
        lang=data.get("lang"),
        viewport=data.get("viewport"),
        heading_levels=tuple(int(level) for level in data.get("headings", [])),
        images=tuple(
            ImageInfo(src=img.get("src"), alt=img.get("alt"), role=img.get("role"), loading=img.get("loading"))
            for img in data.get("images", [])
        ),
        roles=tuple(r for r in data.get("roles", []) if r is not None),
        landmark_count=int(data.get("landmarks", 0)),
        skip_link_count=int(data.get("skipLinks", 0)),
        live_region_count=int(data.get("liveRegions", 0)),
        form_fields=tuple(
            FormField(
                tag=f["tag"],
                type=f.get("type") or "",
                id=f.get("id"),
                name=f.get("name"),
                has_aria_label=bool(f.get("ariaLabel")),
                has_aria_labelledby=bool(f.get("ariaLabelledby")),
                has_label=bool(f.get("label")),
            )
            for f in data.get("fields", [])
        ),
        controls=tuple(
            Control(
                tag=c["tag"],
                id=c.get("id"),
                href=c.get("href"),
                text=c.get("text") or "",
                has_aria_label=bool(c.get("ariaLabel")),
                has_aria_labelledby=bool(c.get("ariaLabelledby")),
            )
            for c in data.get("controls", [])
        ),
        animated_styles=tuple(s for s in data.get("animatedStyles", []) if s),
        links=int(data.get("links", 0)),
        buttons=int(data.get("buttons", 0)),
        inputs=int(data.get("inputs", 0)),
    )


def snapshot_from_page(page) -> DomSnapshot:
    return snapshot_from_payload(page.evaluate(SNAPSHOT_JS, SELECTORS))


def snapshot_from_html(html: str) -> DomSnapshot:
    soup = BeautifulSoup(html, "html.parser")

    title = soup.title.get_text(strip=True) if soup.title else ""
    lang = soup.html.get("lang") if soup.html else None
    viewport = soup.find("meta", attrs={"name": "viewport"})
    labelled = {label.get("for") for label in soup.select("label[for]")}

    fields = []
    for el in soup.select(FORM_FIELD_SELECTOR):
        el_id = el.get("id")
        fields.append({
            "tag": el.name,
            "type": (el.get("type") or "").lower(),
            "id": el_id,
            "name": el.get("name"),
            "ariaLabel": bool((el.get("aria-label") or "").strip()),
            "ariaLabelledby": bool((el.get("aria-labelledby") or "").strip()),
            "label": bool(el_id and el_id in labelled) or el.find_parent("label") is not None,
        })

    return snapshot_from_payload({
        "title": title,
        "lang": lang,
        "viewport": viewport.get("content") if viewport else None,
        "headings": [int(h.name[1]) for h in soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6"])],
        "images": [
            {"src": img.get("src"), "alt": img.get("alt"), "role": img.get("role"), "loading": img.get("loading")}
            for img in soup.find_all("img")
        ],
        "roles": [el.get("role") for el in soup.select("[role]")],
        "landmarks": len(soup.select(LANDMARK_SELECTOR)),
        "skipLinks": len(soup.select(SKIP_LINK_SELECTOR)),
        "liveRegions": len(soup.select(LIVE_REGION_SELECTOR)),
        "fields": fields,
        "controls": [
            {
                "tag": el.name,
                "id": el.get("id"),
                "href": el.get("href"),
                "text": el.get_text(strip=True),
                "ariaLabel": bool((el.get("aria-label") or "").strip()),
                "ariaLabelledby": bool((el.get("aria-labelledby") or "").strip()),
            }
            for el in soup.select(CONTROL_SELECTOR)
        ],
        "animatedStyles": [el.get("style") for el in soup.select(ANIMATED_SELECTOR)],
        "links": len(soup.select("a[href]")),
        "buttons": len(soup.find_all("button")),
        "inputs": len(soup.select(FORM_FIELD_SELECTOR)),
    })
