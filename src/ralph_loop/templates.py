"""Embedded scaffolding written by `ralph --init`."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

CONFIG_TEMPLATE = """\
# Ralph configuration
# Assistant CLI to run each iteration: amp, claude, or copilot
tool: {tool}

# Maximum number of iterations before giving up
max_iterations: 10

# Archive prd.json and progress.txt when branchName changes
auto_archive: true

# Prompt file (inside ralph/) piped to the assistant on stdin
prompt_file: prompt.md

# Command-line arguments per assistant
tool_args:
  amp:
    - --dangerously-allow-all
  claude:
    - --dangerously-skip-permissions
    - --print
  copilot:
    - --allow-all-tools
"""

_LOOP_RULES = """
## Your Task

1. Read the PRD at `ralph/prd.json`.
2. Read the progress log at `ralph/progress.txt` (check the Codebase Patterns section first).
3. Check you are on the branch named in PRD `branchName`. If not, check it out or create it from main.
4. Pick the **highest priority** user story where `passes: false`.
5. Implement that single user story.
6. Run quality checks (typecheck, lint, tests, whatever the project uses).
7. If checks pass, commit ALL changes with message: `feat: [Story ID] - [Story Title]`.
8. Update the PRD to set `passes: true` for the completed story.
9. Append your progress to `ralph/progress.txt`.

## Progress Report Format

APPEND to ralph/progress.txt (never replace, always append):
```
## [Date/Time] - [Story ID]
- What was implemented
- Files changed
- **Learnings for future iterations:**
  - Patterns discovered
  - Gotchas encountered
---
```

## Quality Requirements

- ALL commits must pass the project's quality checks.
- Do NOT commit broken code.
- Keep changes focused and minimal.
- Follow existing code patterns.

## Stop Condition

After completing a user story, check if ALL stories have `passes: true`.

If ALL stories are complete and passing, reply with:
<promise>COMPLETE</promise>

If there are still stories with `passes: false`, end your response normally
(another iteration will pick up the next story).

## Important

- Work on ONE story per iteration.
- Commit frequently.
- Keep CI green.
"""

AMP_PROMPT = """\
# Ralph Agent Instructions

You are an autonomous coding agent working on a software project, driven by Amp.
Each iteration starts fresh: your only memory is git history, `ralph/prd.json`
and `ralph/progress.txt`.
""" + _LOOP_RULES

CLAUDE_PROMPT = """\
# Ralph Agent Instructions

You are Claude, an autonomous coding agent working on a software project.
Each iteration starts fresh: your only memory is git history, `ralph/prd.json`
and `ralph/progress.txt`. Use the project's CLAUDE.md files for conventions and
record reusable learnings there.
""" + _LOOP_RULES

COPILOT_PROMPT = """\
# Ralph Agent Instructions

You are GitHub Copilot running as an autonomous coding agent on a software project.
Each iteration starts fresh: your only memory is git history, `ralph/prd.json`
and `ralph/progress.txt`. Respect `.github/copilot-instructions.md` when present.
""" + _LOOP_RULES

_PRD_GENERATOR_BODY = """
# PRD Generator

Create a Product Requirements Document for a new feature.

## The Job

1. Receive a feature description from the user.
2. Ask 3-5 essential clarifying questions (with lettered options).
3. Generate a structured PRD based on the answers.
4. Save it to `tasks/prd-[feature-name].md`.

Do NOT start implementing. Just create the PRD.

## PRD Structure

1. **Introduction/Overview**: the feature and the problem it solves.
2. **Goals**: specific, measurable objectives.
3. **User Stories**: each with a title, a "As a [user], I want [feature] so that
   [benefit]" description, and verifiable acceptance criteria. Every story must be
   small enough to finish in one focused session. Always include
   "Typecheck passes" as a criterion.
4. **Functional Requirements**: numbered list (FR-1, FR-2, ...).
5. **Non-Goals**: what this feature will not include.
6. **Technical Considerations**: constraints, dependencies, integration points.
7. **Success Metrics** and **Open Questions**.

Write for a junior developer or an AI agent: explicit, unambiguous, no jargon.
"""

_PRD_CONVERTER_BODY = """
# PRD Converter

Convert an existing PRD markdown file into `ralph/prd.json`, the format the
Ralph loop reads.

## Output Format

```json
{
  "project": "[Project Name]",
  "branchName": "ralph/[feature-name-kebab-case]",
  "description": "[Feature description from PRD title/intro]",
  "userStories": [
    {
      "id": "US-001",
      "title": "[Story title]",
      "description": "As a [user], I want [feature] so that [benefit]",
      "acceptanceCriteria": ["Criterion 1", "Typecheck passes"],
      "priority": 1,
      "passes": false,
      "notes": ""
    }
  ]
}
```

## Rules

1. Each user story must be completable in ONE iteration; split anything larger.
2. Order stories by dependency: schema, then backend, then UI.
3. Acceptance criteria must be verifiable, never vague.
4. `branchName` always starts with `ralph/`.
5. Every story starts with `passes: false` and empty `notes`.

## Archiving Previous Runs

If `ralph/prd.json` already exists for a different feature, leave it in place:
the loop archives the previous run into `ralph/archive/` automatically when the
branch name changes.
"""

_SKILL_FRONTMATTER = """\
---
name: {name}
description: {description}
---
"""

CLAUDE_PRD_GENERATOR = (
    _SKILL_FRONTMATTER.format(
        name="prd-generator",
        description="Generate a Product Requirements Document for a new feature.",
    )
    + _PRD_GENERATOR_BODY
)
CLAUDE_PRD_CONVERTER = (
    _SKILL_FRONTMATTER.format(
        name="prd-converter",
        description="Convert a PRD markdown file to ralph/prd.json for the Ralph loop.",
    )
    + _PRD_CONVERTER_BODY
)

AMP_PRD_GENERATOR = _PRD_GENERATOR_BODY.lstrip()
AMP_PRD_CONVERTER = _PRD_CONVERTER_BODY.lstrip()

COPILOT_PRD_GENERATOR = (
    "<!-- Copilot skill: load with #prd-generator -->\n" + _PRD_GENERATOR_BODY
)
COPILOT_PRD_CONVERTER = (
    "<!-- Copilot skill: load with #prd-converter -->\n" + _PRD_CONVERTER_BODY
)


@dataclass(frozen=True, slots=True)
class TemplateBundle:
    """Template contents and skill location resolved for one tool."""

    tool: str
    config: str
    prompt: str
    prd_generator: str
    prd_converter: str
    skills_dir: Path

    @classmethod
    def for_tool(cls, tool: str) -> TemplateBundle:
        if tool == "amp":
            prompt, generator, converter = AMP_PROMPT, AMP_PRD_GENERATOR, AMP_PRD_CONVERTER
            skills_dir = Path(".github", "skills")
        elif tool == "claude":
            prompt, generator, converter = (
                CLAUDE_PROMPT,
                CLAUDE_PRD_GENERATOR,
                CLAUDE_PRD_CONVERTER,
            )
            skills_dir = Path(".claude", "skills")
        elif tool == "copilot":
            prompt, generator, converter = (
                COPILOT_PROMPT,
                COPILOT_PRD_GENERATOR,
                COPILOT_PRD_CONVERTER,
            )
            skills_dir = Path(".github", "skills")
        else:
            raise ValueError(f"Unsupported tool: {tool!r}")

        return cls(
            tool=tool,
            config=CONFIG_TEMPLATE.format(tool=tool),
            prompt=prompt,
            prd_generator=generator,
            prd_converter=converter,
            skills_dir=skills_dir,
        )
