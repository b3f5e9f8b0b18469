"""Writing classification results and optionally the classified/unclassified reads."""

from __future__ import annotations

import gzip
import logging
import os
import sys
from typing import IO, List, Optional, Union

from .classifier import ClassifierResult

logger = logging.getLogger(__name__)

_HEADER_COLUMNS = (
    "readID", "seqID", "taxID", "score", "2ndBestScore", "hitLength", "queryLength", "numMatches",
)
_READS, _MATES, _BARCODE, _UMI = range(4)


class ResultWriter:
    """Writes one tab-separated line per match, plus optional read files.

    ``output`` is a text stream or a path; a path is opened and owned by the writer.
    """

    def __init__(
        self,
        output: Union[IO[str], str, "os.PathLike[str]", None] = None,
        has_barcode: bool = False,
        has_umi: bool = False,
    ) -> None:
        self._owns_output = False
        if output is None:
            self._out: IO[str] = sys.stdout
        elif isinstance(output, (str, os.PathLike)):
            self._out = open(output, "w")
            self._owns_output = True
        else:
            self._out = output
        self.has_barcode = has_barcode
        self.has_umi = has_umi
        self._unclassified: List[Optional[IO[str]]] = [None] * 4
        self._classified: List[Optional[IO[str]]] = [None] * 4
        self.total_count = 0
        self.classified_count = 0

    def set_output_reads(
        self,
        prefix: str,
        has_mate: bool,
        has_barcode: bool,
        has_umi: bool,
        category: int,
    ) -> None:
        """Open gzip read files under ``prefix``; category 0 is unclassified, others classified."""
        handles = self._unclassified if category == 0 else self._classified

        def open_gz(name: str) -> IO[str]:
            return gzip.open(name, "wt", compresslevel=1)

        if has_mate:
            handles[_READS] = open_gz(f"{prefix}_1.fq.gz")
            handles[_MATES] = open_gz(f"{prefix}_2.fq.gz")
        else:
            handles[_READS] = open_gz(f"{prefix}.fq.gz")
        if has_barcode:
            handles[_BARCODE] = open_gz(f"{prefix}_bc.fa.gz")
        if has_umi:
            handles[_UMI] = open_gz(f"{prefix}_um.fa.gz")

    def write_header(self) -> None:
        columns = list(_HEADER_COLUMNS)
        if self.has_barcode:
            columns.append("barcode")
        if self.has_umi:
            columns.append("UMI")
        self._out.write("\t".join(columns) + "\n")

    def _extra_columns(self, barcode: Optional[str], umi: Optional[str]) -> str:
        extra = ""
        if self.has_barcode:
            extra += "\t" + (barcode or "")
        if self.has_umi:
            extra += "\t" + (umi or "")
        return extra

    @staticmethod
    def _record(handle: Optional[IO[str]], read_id: str, seq: str, qual: Optional[str]) -> None:
        if handle is None:
            return
        if qual is None:
            handle.write(f">{read_id}\n{seq}\n")
        else:
            handle.write(f"@{read_id}\n{seq}\n+\n{qual}\n")

    def write(
        self,
        read_id: str,
        seq1: str,
        qual1: Optional[str],
        seq2: Optional[str],
        qual2: Optional[str],
        barcode: Optional[str],
        umi: Optional[str],
        result: ClassifierResult,
    ) -> None:
        """Write the classification lines for one read and copy it to the read files."""
        match_cnt = len(result.tax_ids)
        self.total_count += 1
        extra = self._extra_columns(barcode, umi)
        if match_cnt > 0:
            self.classified_count += 1
            for name, tax_id in zip(result.seq_str_names, result.tax_ids):
                self._out.write(
                    f"{read_id}\t{name}\t{tax_id}\t{result.score}\t{result.secondary_score}"
                    f"\t{result.hit_length}\t{result.query_length}\t{match_cnt}{extra}\n"
                )
            handles = self._classified
        else:
            self._out.write(
                f"{read_id}\tunclassified\t0\t0\t0\t0\t{result.query_length}\t1{extra}\n"
            )
            handles = self._unclassified

        self._record(handles[_READS], read_id, seq1, qual1)
        if seq2 is not None:
            self._record(handles[_MATES], read_id, seq2, qual2)
        if self.has_barcode:
            self._record(handles[_BARCODE], read_id, barcode or "", None)
        if self.has_umi:
            self._record(handles[_UMI], read_id, umi or "", None)

    def summary(self) -> str:
        """Message with the processed and classified counts; also logged."""
        if self.total_count:
            percent = self.classified_count / self.total_count * 100.0
        else:
            percent = float("nan")
        message = (
            f"Processed {self.total_count} read fragments, and {self.classified_count} "
            f"({percent:.2f}%) can be classified."
        )
        logger.info(message)
        return message

    def close(self) -> None:
        """Close the read files and, if the writer opened it, the result output."""
        for handles in (self._unclassified, self._classified):
            for k, handle in enumerate(handles):
                if handle is not None:
                    handle.close()
                    handles[k] = None
        if self._owns_output:
            self._out.close()
            self._owns_output = False
        else:
            self._out.flush()

    def __enter__(self) -> "ResultWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()