"""
ELFScope Report Generator
==========================

Writes a decoded :class:`ParsedImage` to disk as a structured JSON report.
The ``image`` member holds the ELF-field-named structure produced by
:meth:`ParsedImage.to_dict`; the envelope adds provenance metadata.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from elfscope import __version__
from elfscope.core.models import ParsedImage


class ElfscopeReportGenerator:
    """Generate JSON reports from decoded images.

    Usage::

        gen = ElfscopeReportGenerator()
        path = gen.generate_json(image, "report.json", source="/usr/bin/ls")
    """

    def __init__(self, indent: int = 2, include_contents: bool = True) -> None:
        self._indent = indent
        self._include_contents = include_contents

    def build(self, image: ParsedImage, source: str = "") -> dict[str, Any]:
        """Build the report document without writing it."""
        return {
            "report_type": "elfscope_image",
            "version": __version__,
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "source": source,
            "summary": {
                "file_size": image.size,
                "word_width": image.file_header.word_width,
                "byte_order": image.file_header.byte_order,
                "file_type": image.file_header.file_type,
                "machine": image.file_header.machine,
                "segment_count": len(image.program_headers),
                "section_count": len(image.section_headers),
            },
            "image": image.to_dict(include_contents=self._include_contents),
        }

    def generate_json(
        self,
        image: ParsedImage,
        output_path: str | Path,
        source: str = "",
    ) -> str:
        """Generate a JSON report file.

        Args:
            image: The decoded image to report.
            output_path: Filesystem path for the output JSON file.
            source: Path or label of the decoded input.

        Returns:
            The absolute path of the generated report.
        """
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        report = self.build(image, source=source)
        path.write_text(
            json.dumps(report, indent=self._indent, ensure_ascii=False),
            encoding="utf-8",
        )
        return str(path.resolve())
