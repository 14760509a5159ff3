"""Render a conflict hunk as an analysis prompt for a reasoning model."""

from pathlib import PurePath

from mergemend.conflict.models import ConflictHunk

SUGGEST_TEMPLATE = """\
Analyze this git merge conflict and suggest the best resolution:

**File:** {file} ({extension})

**Context Before:**
```
{context_before}
```

**Our Changes ({ours_branch}):**
```{language}
{ours}
```

**Their Changes ({theirs_branch}):**
```{language}
{theirs}
```
{base_section}
**Context After:**
```
{context_after}
```

Please analyze:
1. What is the purpose of each change?
2. Are the changes compatible or truly conflicting?
3. Recommend a resolution strategy: "ours", "theirs", "both", or a merged version
4. If merging is recommended, provide the merged code

Respond with:
- **Recommendation:** [strategy]
- **Confidence:** [high/medium/low]
- **Explanation:** [brief explanation]
- **Merged Code (if applicable):**
```{language}
[merged code here]
```
"""

BASE_SECTION = """
**Common Base:**
```{language}
{base}
```
"""


def format_suggestion_prompt(
    file: str,
    hunk: ConflictHunk,
    template: str | None = None,
) -> str:
    """Fill the analysis template for one hunk.

    Args:
        file: Path of the conflicted file
        hunk: Parsed hunk to describe
        template: Replacement for SUGGEST_TEMPLATE, same fields

    Returns:
        Prompt text; identical inputs give identical output
    """
    extension = PurePath(file).suffix
    language = extension.lstrip(".")
    base_section = ""
    if hunk.base_content:
        base_section = BASE_SECTION.format(
            language=language, base=hunk.base_content
        )

    return (template or SUGGEST_TEMPLATE).format(
        file=file,
        extension=extension or "text",
        language=language,
        context_before="\n".join(hunk.context_before),
        ours_branch=hunk.ours_branch,
        ours=hunk.ours_content,
        theirs_branch=hunk.theirs_branch,
        theirs=hunk.theirs_content,
        base_section=base_section,
        context_after="\n".join(hunk.context_after),
    )
