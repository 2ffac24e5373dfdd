import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from src.rules.models import Rules

RULES_PATH_ENV = "PROPOSAL_RULES_PATH"
DEFAULT_RULES_FILENAME = "rules.yaml"


def _strip_markdown_fences(content: str) -> str:
    """
    Return the first ```yaml fenced block, or the whole text if there is none.
    """
    yaml_lines: list[str] = []
    in_block = False

    for line in content.splitlines():
        s_line = line.strip()
        if s_line.startswith("```yaml"):
            in_block = True
            continue
        if in_block and s_line.startswith("```"):
            return "\n".join(yaml_lines)
        if in_block:
            yaml_lines.append(line)

    return "\n".join(yaml_lines) if in_block else content


def default_rules_path(base_dir: Path | None = None) -> Path:
    """Rules path from PROPOSAL_RULES_PATH, else rules.yaml under base_dir (or cwd)."""
    override = os.environ.get(RULES_PATH_ENV)
    if override:
        return Path(override)
    return (base_dir or Path(os.getcwd())) / DEFAULT_RULES_FILENAME


def load_rules(path: Path) -> Rules:
    """
    Load and validate the rules file.
    Raises FileNotFoundError if file missing.
    Raises ValueError if the YAML or the schema is invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Rules file not found at: {path}")

    clean_content = _strip_markdown_fences(path.read_text())

    try:
        data = yaml.safe_load(clean_content)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in rules file: {e}") from e

    if data is None:
        raise ValueError(f"Rules file is empty: {path}")

    try:
        rules = Rules.model_validate(data)
    except ValidationError as e:
        # Re-raise with a clear message for the caller/logs
        raise ValueError(f"Rules validation failed:\n{e}") from e

    missing = [s for s in rules.project.required_sections if s not in data]
    if missing:
        raise ValueError(f"Rules validation failed: missing required sections: {missing}")

    return rules
