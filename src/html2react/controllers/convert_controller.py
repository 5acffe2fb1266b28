# src/html2react/controllers/convert_controller.py
from __future__ import annotations

import logging
import re
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from tqdm.auto import tqdm

from converter.css.model import CssConverterOptions
from converter.css.registry import create_css_converter
from converter.model import (
    FormattingOptions,
    GeneratedFile,
    GeneratorOptions,
    SplitterOptions,
    TsxGeneratorOptions,
)
from converter.services.component_split_service import ComponentSplitter
from converter.services.jsx_generator_service import JSXGenerator
from converter.services.name_generator_service import NameGenerator
from converter.services.tsx_generator_service import TSXGenerator
from html2react.core.managers.config_manager import ConfigManager, config_manager
from html2react.model import ConversionOptions, ConversionResult, ConversionStage, ConversionStats
from parser.model import ParsedDocument, ParseOptions
from parser.services.html_parse_service import HTMLParser

logger = logging.getLogger(__name__)

STAGES = ("css", "parse", "split", "generate")
NO_CSS = ("", "none", "inline")

_SEPARATORS = re.compile(r"[-_\s]+")
_NON_IDENTIFIER = re.compile(r"[^A-Za-z0-9]")
_LEADING_NON_LETTERS = re.compile(r"^[^A-Za-z]+")

StageAction = Callable[[], Tuple[Any, str]]


def component_identifier(name: str) -> str:
    """Turns a generated component name into a valid JSX component identifier (`card-2` -> `Card2`)."""
    words = _SEPARATORS.split(name or "")
    identifier = _NON_IDENTIFIER.sub("", "".join(w[:1].upper() + w[1:] for w in words))
    identifier = _LEADING_NON_LETTERS.sub("", identifier)
    return identifier[:1].upper() + identifier[1:] if identifier else "Component"


class ConvertController:
    """
    Runs the full HTML to React conversion for one document.

    Stages run in order css, parse, split, generate. The CSS stage rewrites
    inline styles into classes first so the generated components reference
    them; its failure is recoverable (styles stay inline). A failing parse,
    split or generate stage ends the run with `success=False`.
    """

    def __init__(self, config: Optional[ConfigManager] = None):
        self.config = config or config_manager

    # --- Options ---

    def merge_options(self, options: Optional[ConversionOptions] = None) -> ConversionOptions:
        """Explicit option values win over settings.json values."""
        cfg = self.config
        defaults: Dict[str, Any] = {
            "component_name": cfg.get_nested("generator.component_name", "App"),
            "output_format": cfg.get_nested("generator.output_format", "jsx"),
            "split_components": cfg.get_nested("splitter.enabled", True),
            "css_strategy": cfg.get_nested("css.strategy", "vanilla"),
            "include_react_import": cfg.get_nested("generator.include_react_import", True),
            "include_prop_types": cfg.get_nested("generator.include_prop_types", True),
            "convert_class_to_class_name": cfg.get_nested("generator.convert_class_to_class_name", True),
            "formatting": cfg.get_nested("generator.formatting", {}) or {},
            "extract_css_to_separate_file": cfg.get_nested("css.extract_to_separate_file", False),
            "css_class_prefix": cfg.get_nested("css.class_prefix", ""),
            "optimize_css": cfg.get_nested("css.optimize", True),
            "use_css_variables": cfg.get_nested("css.use_css_variables", False),
            "target_filename": cfg.get_nested("css.target_filename", "styles"),
            "custom_component_selectors": cfg.get_nested("splitter.custom_component_selectors", []) or [],
        }
        explicit = (options or ConversionOptions()).model_dump(exclude_none=True)
        return ConversionOptions(**{**defaults, **explicit})

    def _parse_options(self) -> ParseOptions:
        return ParseOptions(
            max_depth=self.config.get_nested("parser.max_depth"),
            preserve_whitespace=self.config.get_nested("parser.preserve_whitespace", False),
            include_comments=self.config.get_nested("parser.include_comments", False),
        )

    def _splitter_options(self, opts: ConversionOptions) -> SplitterOptions:
        section = dict(self.config.get_nested("splitter", {}) or {})
        section.pop("enabled", None)
        section["custom_component_selectors"] = list(opts.custom_component_selectors or [])
        return SplitterOptions(**section)

    # --- Pipeline ---

    def convert(self, html: Optional[str], options: Optional[ConversionOptions] = None) -> ConversionResult:
        started = time.perf_counter()
        opts = self.merge_options(options)
        result = ConversionResult()

        bar = tqdm(total=len(STAGES), desc="Converting", unit="stage", leave=False) if opts.show_progress else None
        try:
            self._convert(html, opts, result, bar)
        finally:
            if bar is not None:
                bar.close()

        result.stats = ConversionStats(
            processing_time=(time.perf_counter() - started) * 1000,
            total_files=len(result.files),
            total_components=sum(1 for f in result.files if f.file_type == "component"),
        )
        logger.info(
            "Conversion %s: %d files, %d warnings in %.1f ms.",
            "succeeded" if result.success else "failed",
            result.stats.total_files, len(result.warnings), result.stats.processing_time,
        )
        return result

    def _convert(self, html: Optional[str], opts: ConversionOptions, result: ConversionResult, bar) -> None:
        ok, css_output = self._run_stage("css", lambda: self._convert_css(html, opts, result), result, bar)
        markup, stylesheet = css_output if ok else (html, None)

        ok, document = self._run_stage("parse", lambda: self._parse(markup), result, bar)
        if not ok:
            return self._fail(result)

        ok, _ = self._run_stage("split", lambda: self._split(document, opts, result), result, bar)
        if not ok:
            return self._fail(result)

        ok, files = self._run_stage(
            "generate", lambda: self._generate(document, opts, stylesheet, result), result, bar,
        )
        if not ok:
            return self._fail(result)

        # Stylesheets were produced first; components lead the file list
        result.files = files + result.files
        result.success = True

    def _run_stage(
            self,
            name: str,
            action: StageAction,
            result: ConversionResult,
            bar,
    ) -> Tuple[bool, Any]:
        stage = ConversionStage(name=name, status="in-progress")
        start = time.perf_counter()
        try:
            value, stage.message = action()
            stage.status = "complete"
            logger.debug("Stage '%s' complete: %s", name, stage.message)
            return True, value
        except Exception as e:
            logger.error("Stage '%s' failed: %s", name, e, exc_info=True)
            stage.status = "error"
            stage.message = str(e) or type(e).__name__
            result.warnings.append(f"{name.capitalize()} error: {stage.message}")
            return False, None
        finally:
            stage.duration = (time.perf_counter() - start) * 1000
            result.stages.append(stage)
            if bar is not None:
                bar.set_postfix_str(name)
                bar.update(1)

    @staticmethod
    def _fail(result: ConversionResult) -> None:
        failed = next(s for s in reversed(result.stages) if s.status == "error")
        result.success = False
        result.files = []
        result.error = failed.message

    # --- Stages ---

    def _convert_css(self, html: Optional[str], opts: ConversionOptions, result: ConversionResult):
        strategy = (opts.css_strategy or "").lower()
        if html is None or strategy in NO_CSS:
            return (html, None), "Inline styles kept"

        converter = create_css_converter(strategy)
        css_options = CssConverterOptions(
            extract_to_separate_file=bool(opts.extract_css_to_separate_file),
            class_prefix=opts.css_class_prefix or "",
            optimize=bool(opts.optimize_css),
            use_css_variables=bool(opts.use_css_variables),
            target_filename=opts.target_filename or "styles",
        )
        converted = converter.convert(html, css_options)
        result.warnings.extend(converted.warnings)

        stylesheet = None
        if converted.css:
            stylesheet = converter.stylesheet_name(css_options)
            result.files.append(GeneratedFile(file_name=stylesheet, content=converted.css, file_type="style"))
            if stylesheet.endswith(".module.css"):
                result.warnings.append(
                    "CSS Modules classes are emitted as plain class names; import the module to map them."
                )

        stats = converter.get_stats()
        return (converted.html, stylesheet), (
            f"{stats.inline_styles_converted} inline styles converted using {converter.get_strategy_name()}"
        )

    def _parse(self, markup: Optional[str]):
        document = HTMLParser().parse(markup, self._parse_options())
        return document, f"Parsed {document.metadata.node_count} nodes"

    def _split(self, document: ParsedDocument, opts: ConversionOptions, result: ConversionResult):
        if not opts.split_components:
            return None, "Splitting disabled"
        splitter = ComponentSplitter(self._splitter_options(opts))
        split = splitter.split(document)
        result.split = split
        result.warnings.extend(split.warnings)
        return split, f"Found {len(split.components)} components"

    def _generate(
            self,
            document: ParsedDocument,
            opts: ConversionOptions,
            stylesheet: Optional[str],
            result: ConversionResult,
    ):
        imports: List[str] = []
        if stylesheet and not stylesheet.endswith(".module.css"):
            imports.append(f"import '../styles/{stylesheet}';")

        targets: List[Tuple[str, Any]] = []
        if result.split and result.split.components:
            targets = [(c.name, c.html) for c in result.split.components]
        else:
            targets = [(opts.component_name or "App", document.root)]

        files: List[GeneratedFile] = []
        names: List[str] = []
        namer = NameGenerator()
        for name, source in targets:
            # Distinct names can share an identifier (`card`, `Card`); each file needs its own
            identifier = component_identifier(namer.generate_unique_name(component_identifier(name)))
            generated = self._make_generator(identifier, opts, imports).generate(source)
            files.extend(generated.files)
            result.warnings.extend(generated.warnings)
            names.append(identifier)

        if len(names) > 1:
            files.append(self._index_file(names, opts))
        return files, f"Generated {len(files)} files"

    @staticmethod
    def _make_generator(name: str, opts: ConversionOptions, imports: List[str]) -> JSXGenerator:
        base = dict(
            component_name=name,
            formatting=opts.formatting or FormattingOptions(),
            include_react_import=bool(opts.include_react_import),
            custom_imports=list(imports),
            convert_class_to_class_name=bool(opts.convert_class_to_class_name),
        )
        if opts.output_format == "tsx":
            return TSXGenerator(TsxGeneratorOptions(**base, include_prop_types=bool(opts.include_prop_types)))
        return JSXGenerator(GeneratorOptions(**base))

    @staticmethod
    def _index_file(names: List[str], opts: ConversionOptions) -> GeneratedFile:
        if opts.output_format == "tsx":
            lines = [f"export {{ {name} }} from './{name}';" for name in names]
            file_name = "index.ts"
        else:
            lines = [f"export {{ default as {name} }} from './{name}';" for name in names]
            file_name = "index.js"
        return GeneratedFile(file_name=file_name, content="\n".join(lines) + "\n", file_type="index")
