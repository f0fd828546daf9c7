from dataclasses import asdict, dataclass, field
from typing import Iterable, List, Optional

from a11ysuite.snapshot import Control, DomSnapshot, FormField, ImageInfo

VALID_ARIA_ROLES = frozenset([
    "button", "link", "navigation", "main", "banner", "contentinfo",
    "complementary", "search", "form", "dialog", "alert", "status",
    "tablist", "tab", "tabpanel", "menu", "menuitem", "listbox", "option",
    "progressbar", "slider", "spinbutton", "textbox", "checkbox", "radio",
    "img", "presentation", "none", "region", "article", "section",
])

DECORATIVE_ROLES = ("presentation", "none")

# input types that never need a visible label
UNLABELLED_INPUT_TYPES = ("hidden", "submit", "button", "reset", "image")

MAX_FIRST_HEADING_LEVEL = 3
MAX_HEADING_JUMP = 2


class _Result:
    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class HeadingHierarchyResult(_Result):
    is_valid: bool
    issues: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ImageAccessibilityResult(_Result):
    total_images: int
    images_without_alt: int
    percentage_without_alt: float


@dataclass(frozen=True)
class AriaResult(_Result):
    landmarks: int
    valid_roles: bool
    issues: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class KeyboardNavResult(_Result):
    success: bool
    navigated_elements: int


@dataclass(frozen=True)
class DocumentStructureResult(_Result):
    has_title: bool
    has_lang: bool
    has_viewport: bool

    @property
    def is_complete(self):
        return self.has_title and self.has_lang and self.has_viewport


@dataclass(frozen=True)
class FormLabelResult(_Result):
    total_fields: int
    is_valid: bool
    issues: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class AccessibleNameResult(_Result):
    total_controls: int
    is_valid: bool
    issues: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ReducedMotionResult(_Result):
    animated_elements: int
    is_valid: bool
    issues: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class LazyImageResult(_Result):
    lazy_images: int
    is_valid: bool
    issues: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class InteractiveElements(_Result):
    links: int
    buttons: int
    inputs: int

    @property
    def total(self):
        return self.links + self.buttons + self.inputs


def check_heading_hierarchy(levels: Iterable[int]) -> HeadingHierarchyResult:
    """
    Validate heading levels given in document order.

    The page should open with h1-h3, and consecutive headings may move
    up or down by at most two levels (h2 -> h4 is fine, h2 -> h5 is not).
    """
    levels = list(levels)
    issues = []

    if levels:
        if levels[0] > MAX_FIRST_HEADING_LEVEL:
            issues.append(f"First heading should be h1-h{MAX_FIRST_HEADING_LEVEL} (found h{levels[0]})")
        for prev, cur in zip(levels, levels[1:]):
            if abs(cur - prev) > MAX_HEADING_JUMP:
                issues.append(f"Heading levels should not jump more than {MAX_HEADING_JUMP} levels (h{prev} -> h{cur})")

    return HeadingHierarchyResult(is_valid=not issues, issues=issues)


def is_missing_alt(image: ImageInfo) -> bool:
    role = (image.role or "").strip().lower()
    if role in DECORATIVE_ROLES:
        return False
    return not (image.alt or "").strip()


def check_image_accessibility(images: Iterable[ImageInfo]) -> ImageAccessibilityResult:
    images = list(images)
    total = len(images)
    missing = sum(1 for img in images if is_missing_alt(img))
    percentage = (missing / total) * 100 if total else 0.0
    return ImageAccessibilityResult(
        total_images=total,
        images_without_alt=missing,
        percentage_without_alt=percentage,
    )


def check_aria_implementation(roles: Iterable[str], landmarks: int,
                              valid_roles=VALID_ARIA_ROLES) -> AriaResult:
    issues = []
    for role in roles:
        value = (role or "").strip()
        if value and value.lower() not in valid_roles:
            issues.append(f"Invalid ARIA role: {value}")
    return AriaResult(landmarks=landmarks, valid_roles=not issues, issues=issues)


def check_document_structure(snapshot: DomSnapshot) -> DocumentStructureResult:
    return DocumentStructureResult(
        has_title=bool(snapshot.title.strip()),
        has_lang=bool((snapshot.lang or "").strip()),
        has_viewport=bool((snapshot.viewport or "").strip()),
    )


def has_basic_accessibility(snapshot: DomSnapshot) -> bool:
    """Title and lang present, plus at least one heading or landmark."""
    structure = check_document_structure(snapshot)
    has_outline = bool(snapshot.heading_levels) or snapshot.landmark_count > 0
    return structure.has_title and structure.has_lang and has_outline


def needs_label(f: FormField) -> bool:
    return not (f.tag == "input" and f.type in UNLABELLED_INPUT_TYPES)


def check_form_labels(fields: Iterable[FormField]) -> FormLabelResult:
    fields = [f for f in fields if needs_label(f)]
    issues = [
        f"Form field without label: {f.display_name}"
        for f in fields
        if not (f.has_label or f.has_aria_label or f.has_aria_labelledby)
    ]
    return FormLabelResult(total_fields=len(fields), is_valid=not issues, issues=issues)


def has_accessible_name(control: Control) -> bool:
    return bool(control.text.strip()) or control.has_aria_label or control.has_aria_labelledby


def check_accessible_names(controls: Iterable[Control]) -> AccessibleNameResult:
    """Buttons and links need visible text, aria-label or aria-labelledby."""
    controls = list(controls)
    issues = [
        f"{'Button' if c.tag == 'button' else 'Link'} without accessible text: {c.display_name}"
        for c in controls
        if not has_accessible_name(c)
    ]
    return AccessibleNameResult(total_controls=len(controls), is_valid=not issues, issues=issues)


def check_reduced_motion(styles: Iterable[str]) -> ReducedMotionResult:
    """
    With prefers-reduced-motion set, inline animations should be switched
    off. Transitions are counted but not flagged.
    """
    styles = list(styles)
    issues = [
        f"Inline animation not disabled: {style.strip()}"
        for style in styles
        if "animation" in style and "animation: none" not in style
    ]
    return ReducedMotionResult(animated_elements=len(styles), is_valid=not issues, issues=issues)


def check_lazy_images(images: Iterable[ImageInfo]) -> LazyImageResult:
    lazy = [img for img in images if (img.loading or "").strip().lower() == "lazy"]
    issues = [
        f"Lazy loaded image without alt text: {img.src or '(no src)'}"
        for img in lazy
        if is_missing_alt(img)
    ]
    return LazyImageResult(lazy_images=len(lazy), is_valid=not issues, issues=issues)


def count_interactive_elements(snapshot: DomSnapshot) -> InteractiveElements:
    return InteractiveElements(links=snapshot.links, buttons=snapshot.buttons, inputs=snapshot.inputs)


def filter_violations(violations, rule_id: Optional[str] = None):
    if rule_id is None:
        return list(violations)
    return [v for v in violations if v.get("id") == rule_id]
