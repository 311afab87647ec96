"""Rewrite HTML documents so that only their critical CSS is inline."""

import asyncio
import json
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import csscompressor
from bs4 import Tag

from ..dom.document import HTMLDocument
from ..managers.loader import StylesheetLoader
from ..utils.config import CSS_LOADER_LAZY, CSS_LOADER_PREAMBLE, JS_PRELOAD_MODES
from ..utils.error import StructuralMismatchError
from ..utils.logging import create_logger
from .options import Options
from .reducer import CriticalReducer, ReductionResult
from .stylesheet import StyleSheet


@dataclass
class StyleSource:
    """Where a ``<style>`` element came from and what belongs to it."""

    element: Tag
    name: Optional[str] = None
    external: bool = False
    reduce: bool = True
    parsed: Optional[StyleSheet] = None
    links: List[Tag] = field(default_factory=list)


@dataclass
class ProcessResult:
    """Processed markup plus what happened to each stylesheet.

    ``pruned`` maps external stylesheet names to their non-critical CSS and
    is only filled when pruning is on.
    """

    html: str
    results: List[ReductionResult] = field(default_factory=list)
    pruned: Dict[str, str] = field(default_factory=dict)


@dataclass
class _Context:
    document: HTMLDocument
    sources: Dict[int, StyleSource] = field(default_factory=dict)
    results: List[ReductionResult] = field(default_factory=list)
    pruned: Dict[str, str] = field(default_factory=dict)

    def source_of(self, element: Tag) -> Optional[StyleSource]:
        return self.sources.get(id(element))

    def register(self, source: StyleSource) -> StyleSource:
        self.sources[id(source.element)] = source
        return source


def js_string(value: str) -> str:
    """Quote ``value`` as a JavaScript string that is safe inside ``<script>``."""
    return json.dumps(value).replace('<', '\\u003c')


def js_escape(value: str) -> str:
    """Escape ``value`` for use inside a single quoted JavaScript string."""
    return value.replace('\\', '\\\\').replace("'", "\\'").replace('<', '\\u003c')


class CriticalInliner:
    """Inline critical CSS into HTML documents.

    Example:
        inliner = CriticalInliner(Options(path='dist'))
        html = asyncio.run(inliner.process(html))
    """

    def __init__(self, options: Optional[Options] = None, loader: Optional[StylesheetLoader] = None):
        self.options = options or Options()
        self.logger = self.options.logger or create_logger(self.options.log_level)
        self.loader = loader or StylesheetLoader(self.options.path, self.options.public_path)
        self.reducer = CriticalReducer(self.options, self.logger)

    async def process(self, html: str) -> str:
        """Apply critical CSS processing to ``html`` and return the new markup."""
        result = await self.process_document(html)
        return result.html

    async def process_document(self, html: str) -> ProcessResult:
        """Like ``process`` but also return the per-stylesheet results."""
        start = time.perf_counter()
        ctx = _Context(HTMLDocument(html))

        if self.options.additional_stylesheets:
            await self.embed_additional_stylesheets(ctx)

        if self.options.external:
            links = ctx.document.query_all('link[rel="stylesheet"]')
            await asyncio.gather(*(self.embed_linked_stylesheet(link, ctx) for link in links))

        styles = self.get_affected_style_tags(ctx)
        await asyncio.gather(*(self.process_style(style, ctx) for style in styles))

        if self.options.merge_stylesheets and styles:
            self.merge_stylesheets(ctx)

        output = ctx.document.serialize()
        self.logger.info(f"Time {(time.perf_counter() - start) * 1000:.2f}ms")
        return ProcessResult(output, ctx.results, ctx.pruned)

    def get_affected_style_tags(self, ctx: _Context) -> List[Tag]:
        styles = ctx.document.query_all('style')
        if self.options.reduce_inline_styles:
            return styles
        return [style for style in styles if getattr(ctx.source_of(style), 'external', False)]

    async def embed_additional_stylesheets(self, ctx: _Context) -> None:
        hrefs = list(dict.fromkeys(self.options.additional_stylesheets))
        loaded = await asyncio.gather(*(self.loader.get_parsed_stylesheet(href) for href in hrefs))
        for href, entry in zip(hrefs, loaded):
            if entry is None:
                continue
            text, parsed = entry
            style = ctx.document.create_element('style')
            ctx.document.set_text(style, text)
            ctx.document.head.append(style)
            ctx.register(StyleSource(style, name=href, external=True, parsed=parsed))

    async def embed_linked_stylesheet(self, link: Tag, ctx: _Context) -> None:
        """Inline the sheet of ``link`` and rewrite the link for the preload strategy."""
        href = link.get('href')
        media = link.get('media')
        document = ctx.document

        if self.options.is_filtered(href):
            return

        sheet = await self.loader.get_css_asset(href)
        if not sheet:
            return

        style = document.create_element('style')
        document.set_text(style, sheet)
        link.insert_before(style)
        source = ctx.register(StyleSource(style, name=href, external=True, links=[link]))

        if self.check_inline_threshold(link, source, sheet):
            return

        preload = self.options.preload
        if preload is False:
            return

        noscript_fallback = False
        if preload == 'body':
            document.body.append(link)
        else:
            link['rel'] = 'preload'
            link['as'] = 'style'
            if preload in JS_PRELOAD_MODES:
                script = document.create_element('script')
                document.set_text(script, self._loader_script(href, media, preload == 'js-lazy'))
                link.insert_after(script)
                source.links.append(script)
                noscript_fallback = True
            elif preload == 'media':
                link['rel'] = 'stylesheet'
                del link['as']
                link['media'] = 'print'
                link['onload'] = f"this.media='{js_escape(media or 'all')}'"
                noscript_fallback = True
            elif preload == 'swap-high':
                link['rel'] = 'alternate stylesheet preload'
                link['title'] = 'styles'
                link['onload'] = "this.title='';this.rel='stylesheet'"
                noscript_fallback = True
            elif preload == 'swap':
                link['onload'] = "this.rel='stylesheet'"
                noscript_fallback = True
            else:
                body_link = document.create_element('link', {'rel': 'stylesheet'})
                if media:
                    body_link['media'] = media
                body_link['href'] = href
                document.body.append(body_link)
                source.links.append(body_link)

        if self.options.noscript_fallback and noscript_fallback:
            noscript = document.create_element('noscript')
            noscript_link = document.create_element('link', {'rel': 'stylesheet', 'href': href})
            if media:
                noscript_link['media'] = media
            noscript.append(noscript_link)
            link.insert_after(noscript)
            source.links.append(noscript)

    def _loader_script(self, href: str, media: Optional[str], lazy: bool) -> str:
        preamble = CSS_LOADER_PREAMBLE
        args = js_string(href)
        if lazy:
            preamble = preamble.replace('l.href', CSS_LOADER_LAZY, 1)
            args += ',' + js_string(media or 'all')
        return f"{preamble}$loadcss({args})"

    def check_inline_threshold(self, link: Tag, source: StyleSource, sheet: str) -> bool:
        """Inline the whole sheet when it is below ``inline_threshold``."""
        threshold = self.options.inline_threshold
        if threshold and len(sheet) < threshold:
            source.reduce = False
            self.logger.info(
                f"Inlined all of {source.name} ({len(sheet)} was below the threshold of {threshold})"
            )
            link.extract()
            return True
        return False

    async def process_style(self, style: Tag, ctx: _Context) -> None:
        """Replace the text of ``style`` with its critical CSS."""
        source = ctx.source_of(style)
        if source is not None and not source.reduce:
            return

        document = ctx.document
        sheet = document.get_text(style)
        if not sheet.strip():
            return

        name = source.name.lstrip('/') if source is not None and source.name else 'inline CSS'
        stylesheet = source.parsed if source is not None and source.parsed is not None else sheet
        try:
            result = self.reducer.reduce(stylesheet, document, name=name)
        except StructuralMismatchError as e:
            self.logger.error(f"Skipping {name}: {e}")
            return
        ctx.results.append(result)
        external = source is not None and source.external

        if external and result.non_critical_text is not None and not result.fully_inlined:
            ctx.pruned[name] = result.non_critical_text

        if result.is_empty:
            style.extract()
            return

        if result.fully_inlined:
            document.set_text(style, result.original_text)
            if external:
                for element in source.links:
                    element.extract()
            return

        document.set_text(style, result.critical_text)

    def merge_stylesheets(self, ctx: _Context) -> None:
        """Merge every affected ``<style>`` into the first one."""
        styles = self.get_affected_style_tags(ctx)
        if not styles:
            self.logger.warn(
                'Merging inline stylesheets into a single <style> tag skipped, '
                'no inline stylesheets to merge'
            )
            return

        document = ctx.document
        first = styles[0]
        sheet = document.get_text(first)
        for style in styles[1:]:
            sheet += document.get_text(style)
            style.extract()

        if self.options.minify:
            sheet = csscompressor.compress(sheet)
        document.set_text(first, sheet)


__all__ = ['CriticalInliner', 'ProcessResult', 'StyleSource', 'js_string', 'js_escape']
