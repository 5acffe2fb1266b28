# src/converter/services/code_format_service.py
import logging
import re
from typing import List, Optional

from converter.model import FormattingOptions

logger = logging.getLogger(__name__)

SOURCE_INDENT = 2
SUPPORTED_PARSERS = ("jsx", "tsx", "typescript")

_IMPORT_LINE = re.compile(r"^(import\b.*?)(;?)\s*$")
_STATEMENT_END = re.compile(r"^( {0,2}(?:export default \w+|\)))\s*(;?)\s*$")
_QUOTED = re.compile(r"""(['"])((?:(?!\1).)*)\1""")


class CodeFormatter:
    """
    Normalizes generated component source.

    Generators emit two-space indented code; the formatter re-indents it
    to the configured style, trims trailing whitespace, collapses runs of
    blank lines and applies the quote and semicolon policy to statement
    lines. Formatting is best-effort: failures are logged and the input is
    returned untouched.
    """

    def __init__(self, options: Optional[FormattingOptions] = None):
        self.options = options or FormattingOptions()

    def format(self, code: Optional[str], parser: str = "typescript") -> str:
        if not code or not code.strip():
            return code or ""
        if not self.options.enabled:
            return code
        if parser not in SUPPORTED_PARSERS:
            logger.warning(f"Unknown formatter parser '{parser}', leaving code unformatted.")
            return code

        try:
            return self._format(code)
        except Exception as e:
            logger.warning(f"Code formatting failed: {e}")
            return code

    def _format(self, code: str) -> str:
        out: List[str] = []
        previous_blank = False

        for raw in code.splitlines():
            line = raw.rstrip()
            if not line:
                if previous_blank or not out:
                    continue
                out.append("")
                previous_blank = True
                continue
            previous_blank = False
            out.append(self._reindent(self._statement_policy(line)))

        while out and not out[-1]:
            out.pop()
        return "\n".join(out) + "\n"

    def _reindent(self, line: str) -> str:
        stripped = line.lstrip(" ")
        width = len(line) - len(stripped)
        level, rest = divmod(width, SOURCE_INDENT)
        if self.options.indent_style == "tabs":
            unit = "\t"
        else:
            unit = " " * self.options.indent_size
        return unit * level + " " * rest + stripped

    def _statement_policy(self, line: str) -> str:
        match = _IMPORT_LINE.match(line)
        if match:
            body = self._apply_quotes(match.group(1))
            return body + (";" if self.options.semi else "")

        match = _STATEMENT_END.match(line)
        if match:
            return match.group(1) + (";" if self.options.semi else "")
        return line

    def _apply_quotes(self, statement: str) -> str:
        quote = "'" if self.options.single_quote else '"'
        return _QUOTED.sub(lambda m: f"{quote}{m.group(2)}{quote}" if quote not in m.group(2) else m.group(0),
                           statement)

    def check(self, code: str, parser: str = "typescript") -> bool:
        """True when formatting would not change the code."""
        return self.format(code, parser) == code

    def update_options(self, **changes) -> None:
        self.options = self.options.model_copy(update=changes)

    def get_options(self) -> FormattingOptions:
        return self.options.model_copy()

    @staticmethod
    def get_supported_parsers() -> List[str]:
        return list(SUPPORTED_PARSERS)
