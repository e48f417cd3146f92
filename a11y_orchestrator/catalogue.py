"""Catalogue of known accessibility test types."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from a11y_orchestrator.models.report import Importance, Priority


@dataclass(frozen=True, kw_only=True)
class RemediationTemplate:
    """Recommendation issued when a test type finds many violations per page.

    ``description`` is formatted with ``pages`` (pages tested).
    """

    priority: Priority
    category: str
    title: str
    description: str
    actions: Sequence[str]


@dataclass(frozen=True, kw_only=True)
class TestTypeInfo:
    """Static description of one test type."""

    __test__ = False

    key: str
    name: str
    tool: str
    importance: Importance
    impact: str
    remediation: RemediationTemplate


AXE = "a11y:axe"
PA11Y = "a11y:pa11y"
LIGHTHOUSE = "a11y:lighthouse"
CONTRAST = "a11y:contrast-basic"
KEYBOARD = "test:keyboard"
SCREEN_READER = "test:screen-reader"
MOBILE = "test:mobile"
FORM = "test:form"

DEFAULT_IMPACT = "Accessibility barriers affect user experience"

CATALOGUE: Mapping[str, TestTypeInfo] = {
    AXE: TestTypeInfo(
        key=AXE,
        name="axe-core Analysis",
        tool="axe-core",
        importance="high",
        impact="Multiple accessibility standards violations affect various user groups",
        remediation=RemediationTemplate(
            priority="high",
            category="automated_rules",
            title="Resolve axe-core Rule Violations",
            description="Automated rule violations detected on {pages} pages.",
            actions=[
                "Fix missing alternative text and form labels",
                "Correct invalid ARIA attributes and roles",
                "Ensure landmark regions and heading order are valid",
                "Re-run axe-core after each fix to confirm resolution",
            ],
        ),
    ),
    PA11Y: TestTypeInfo(
        key=PA11Y,
        name="Pa11y Testing",
        tool="pa11y",
        importance="high",
        impact="Comprehensive accessibility barriers identified across multiple guidelines",
        remediation=RemediationTemplate(
            priority="high",
            category="guideline_conformance",
            title="Address Pa11y Guideline Failures",
            description="WCAG guideline failures reported by Pa11y on {pages} pages.",
            actions=[
                "Review each failing WCAG success criterion",
                "Fix document language and page title issues",
                "Correct link purpose and button naming",
                "Validate fixes against the WCAG 2.1 AA standard",
            ],
        ),
    ),
    LIGHTHOUSE: TestTypeInfo(
        key=LIGHTHOUSE,
        name="Lighthouse Audit",
        tool="lighthouse",
        importance="medium",
        impact="Technical accessibility issues reduce compatibility with assistive technology",
        remediation=RemediationTemplate(
            priority="medium",
            category="technical_compatibility",
            title="Improve Lighthouse Accessibility Audits",
            description="Lighthouse accessibility audits failed on {pages} pages.",
            actions=[
                "Fix failing Lighthouse accessibility audits",
                "Ensure unique IDs and valid ARIA references",
                "Provide accessible names for all controls",
                "Track the Lighthouse accessibility score in CI",
            ],
        ),
    ),
    CONTRAST: TestTypeInfo(
        key=CONTRAST,
        name="Color Contrast Analysis",
        tool="contrast-checker",
        importance="high",
        impact=(
            "Users with visual impairments cannot read content due to "
            "insufficient color contrast"
        ),
        remediation=RemediationTemplate(
            priority="high",
            category="color_contrast",
            title="Improve Color Contrast Ratios",
            description="{pages} pages have color contrast issues affecting readability.",
            actions=[
                "Review all text and background color combinations",
                "Ensure 4.5:1 contrast ratio for normal text",
                "Ensure 3:1 contrast ratio for large text and UI components",
                "Test colors with contrast checking tools",
            ],
        ),
    ),
    KEYBOARD: TestTypeInfo(
        key=KEYBOARD,
        name="Keyboard Navigation",
        tool="keyboard-navigation",
        importance="critical",
        impact="Users who rely on keyboard navigation cannot access interactive elements",
        remediation=RemediationTemplate(
            priority="critical",
            category="keyboard_access",
            title="Fix Keyboard Navigation Issues",
            description="Keyboard accessibility problems found across {pages} pages.",
            actions=[
                "Ensure all interactive elements are keyboard focusable",
                "Implement proper focus indicators",
                "Create logical tab order",
                "Test navigation with keyboard only",
            ],
        ),
    ),
    SCREEN_READER: TestTypeInfo(
        key=SCREEN_READER,
        name="Screen Reader Testing",
        tool="screen-reader",
        importance="critical",
        impact="Screen reader users cannot understand or navigate content effectively",
        remediation=RemediationTemplate(
            priority="critical",
            category="screen_reader",
            title="Improve Screen Reader Compatibility",
            description="Screen reader accessibility issues identified on {pages} pages.",
            actions=[
                "Add proper ARIA labels and roles",
                "Improve heading structure",
                "Provide alternative text for images",
                "Test with actual screen readers",
            ],
        ),
    ),
    MOBILE: TestTypeInfo(
        key=MOBILE,
        name="Mobile Accessibility",
        tool="mobile-accessibility",
        importance="medium",
        impact="Mobile and touch users cannot operate content at small viewport sizes",
        remediation=RemediationTemplate(
            priority="medium",
            category="mobile",
            title="Improve Mobile Accessibility",
            description="Mobile accessibility issues found on {pages} pages.",
            actions=[
                "Ensure touch targets are at least 44 by 44 CSS pixels",
                "Support zoom and reflow up to 400%",
                "Avoid content that requires a specific orientation",
                "Test with mobile screen readers",
            ],
        ),
    ),
    FORM: TestTypeInfo(
        key=FORM,
        name="Form Accessibility",
        tool="form-accessibility",
        importance="high",
        impact="Users cannot complete forms or provide required information",
        remediation=RemediationTemplate(
            priority="high",
            category="forms",
            title="Enhance Form Accessibility",
            description="Form accessibility improvements needed on {pages} pages.",
            actions=[
                "Associate labels with form controls",
                "Provide clear error messages",
                "Add form validation feedback",
                "Implement proper fieldset grouping",
            ],
        ),
    ),
}

TEST_TYPES: Sequence[str] = tuple(CATALOGUE)


def display_name(test_type: str) -> str:
    """Human-readable name of a test type, falling back to its key."""
    info = CATALOGUE.get(test_type)
    return info.name if info else test_type


def importance(test_type: str) -> Importance:
    """How important running this test type is for a complete assessment."""
    info = CATALOGUE.get(test_type)
    return info.importance if info else "medium"


def impact_description(test_type: str, avg_violations: float) -> str:
    """Describe who is affected by a systematic issue of this test type."""
    info = CATALOGUE.get(test_type)
    base = info.impact if info else DEFAULT_IMPACT
    if avg_violations > 8:
        return f"{base} (severe impact)"
    if avg_violations > 5:
        return f"{base} (significant impact)"
    return base
