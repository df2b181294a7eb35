import json
import string
from pathlib import Path

from heatsync.extraction.exceptions import ExtractionError
from heatsync.utils.names import NormalizedName

_PROMPT_DIR = Path(__file__).parent / "prompts"
_REQUIRED_FIELDS = frozenset({"first_last", "last_first", "expected_count_section", "json_schema"})


class PromptBuilder:
    """Builds the extraction instructions for one swimmer.

    The template and output schema ship in the prompts/ directory; either can
    be overridden with a path. Both are checked once at construction so a bad
    template fails before any PDF is touched.
    """

    def __init__(
        self,
        prompt_template_path: Path | None = None,
        json_schema_path: Path | None = None,
    ) -> None:
        self._prompt_template = self._check_template(
            _read_packaged(prompt_template_path, "extraction_prompt.txt")
        )
        self._json_schema = self._check_schema(
            _read_packaged(json_schema_path, "extraction_schema.json")
        )

    def build(
        self,
        name: NormalizedName,
        expected_event_count: int | None = None,
        pages: list[int] | None = None,
    ) -> str:
        """Render the prompt.

        expected_event_count comes from a text pre-scan and is only advisory:
        the pre-scan may also count a name on a roster or cover page.
        """
        return self._prompt_template.format(
            first_last=name.first_last,
            last_first=name.last_first,
            json_schema=self._json_schema,
            expected_count_section=self._expected_count_section(expected_event_count, pages),
        )

    @staticmethod
    def _check_template(template: str) -> str:
        fields = {field for _, field, _, _ in string.Formatter().parse(template) if field}
        missing = sorted(_REQUIRED_FIELDS - fields)
        if missing:
            raise ExtractionError(f"Prompt template is missing placeholder(s): {', '.join(missing)}")
        return template

    @staticmethod
    def _check_schema(schema: str) -> str:
        try:
            parsed = json.loads(schema)
        except json.JSONDecodeError as exc:
            raise ExtractionError(f"Output schema is not valid JSON: {exc}") from exc
        if not isinstance(parsed, dict) or "events" not in parsed:
            raise ExtractionError("Output schema must be a JSON object with an 'events' field")
        return schema.strip()

    @staticmethod
    def _expected_count_section(count: int | None, pages: list[int] | None) -> str:
        if not count or count <= 0:
            return ""
        lines = [
            "",
            "## Expected number of events",
            f"A text scan found this swimmer's name {count} time(s) in the document.",
            f"You must find at least {count} event(s) for this swimmer. "
            "If you find fewer, re-scan every page before answering.",
        ]
        if pages:
            page_list = ", ".join(str(p) for p in pages)
            lines.append(f"The name appears on page(s): {page_list}.")
        return "\n".join(lines) + "\n"


def _read_packaged(path: Path | None, default_name: str) -> str:
    path = path or _PROMPT_DIR / default_name
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ExtractionError(f"Failed to read {path.name}: {exc}") from exc
