"""Shared constants for step prompts, bounds and fallbacks."""

from __future__ import annotations

STRUCTURE_DISCOVERY = "Structure Discovery"
PATTERN_EXTRACTION = "Pattern Extraction"
API_SURFACE_ANALYSIS = "API Surface Analysis"
DOCUMENTATION_SYNTHESIS = "Documentation Synthesis"

STEP_ORDER: tuple[str, ...] = (
    STRUCTURE_DISCOVERY,
    PATTERN_EXTRACTION,
    API_SURFACE_ANALYSIS,
    DOCUMENTATION_SYNTHESIS,
)

STEP_GOALS: dict[str, str] = {
    STRUCTURE_DISCOVERY: "Understand the package organization and identify key files",
    PATTERN_EXTRACTION: "Find the most common usage patterns",
    API_SURFACE_ANALYSIS: "Document available methods and their usage",
    DOCUMENTATION_SYNTHESIS: "Create the final snippet combining all findings",
}

SYSTEM_PROMPT = (
    "You are an expert technical writer creating API documentation. Be precise, practical, "
    "and focus on what developers actually need to know."
)

MAX_OUTPUT_TOKENS = 1500
TEMPERATURE = 0.2

# Context bounds: (max items, max characters per item).
TREE_SOURCE_LIMIT = 10
TREE_CATEGORY_LIMIT = 5
EXAMPLE_EXCERPT_LIMIT = (3, 800)
TEST_EXCERPT_LIMIT = (2, 600)
TYPE_FILE_LIMIT = 5
SOURCE_EXCERPT_LIMIT = 8
MANIFEST_CHAR_LIMIT = 2000
PACKAGE_INFO_CHAR_LIMIT = 2000

NOT_INSTALLABLE = "None - this is not an installable package"

OUTPUT_TEMPLATE = """
# [Package Name]

[Brief description - 2-3 sentences explaining what this package does]

## Installation

```bash
[installation command - npm/pip/etc based on package type]
```

## Configuration

[Any required setup, environment variables, or initialization - include code example if needed]

## Authentication

```[language]
// How to authenticate/initialize with realistic example
```

## Basic Usage

### [Read/Get Operation Name]
```[language]
// Realistic example of fetching/reading data
```

### [Write/Create Operation Name]
```[language]
// Realistic example of creating/updating data
```

### [Error Handling]
```[language]
// Common error patterns and proper handling
```

### [Additional Operation 1] (if available)
```[language]
// Additional important operation example
```

### [Additional Operation 2] (if available)
```[language]
// Another additional important operation example
```

## Additional Resources
- [Official Documentation](actual-link-if-available)
- [GitHub Repository](actual-github-link-if-available)
""".strip()


__all__ = [
    "API_SURFACE_ANALYSIS",
    "DOCUMENTATION_SYNTHESIS",
    "EXAMPLE_EXCERPT_LIMIT",
    "MANIFEST_CHAR_LIMIT",
    "MAX_OUTPUT_TOKENS",
    "NOT_INSTALLABLE",
    "OUTPUT_TEMPLATE",
    "PACKAGE_INFO_CHAR_LIMIT",
    "PATTERN_EXTRACTION",
    "SOURCE_EXCERPT_LIMIT",
    "STEP_GOALS",
    "STEP_ORDER",
    "STRUCTURE_DISCOVERY",
    "SYSTEM_PROMPT",
    "TEMPERATURE",
    "TEST_EXCERPT_LIMIT",
    "TREE_CATEGORY_LIMIT",
    "TREE_SOURCE_LIMIT",
    "TYPE_FILE_LIMIT",
]
