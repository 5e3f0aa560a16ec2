# qurbani/services/receipt_pdf.py
"""
Generación del recibo PDF de Qurbani.
Sólo dibuja; los datos llegan ya calculados en un ReceiptSummary.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import BinaryIO, List, Optional, Union

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from qurbani.domain.allocation import SubmissionBatch
from qurbani.domain.hissa import HissaType
from qurbani.domain.submitter import Region
from qurbani.logger import get_logger
from qurbani.utils.helpers import paragraph_text

logger = get_logger(__name__)

# Nombre / Tipo / Hissas: suman el ancho útil de A4 con los márgenes por defecto
NAME_TABLE_WIDTHS = [260, 120, 71]


@dataclass(frozen=True)
class ReceiptLine:
    name: str
    type: HissaType
    hissas: int


@dataclass(frozen=True)
class ReceiptSummary:
    receipt_number: str
    billed_to: str
    phone: Optional[str]
    region: Region
    rate: float
    submitted_on: date
    lines: List[ReceiptLine] = field(default_factory=list)

    @property
    def total_hissas(self) -> int:
        return sum(line.hissas for line in self.lines)

    @property
    def total_amount(self) -> float:
        return self.total_hissas * self.rate

    @classmethod
    def from_batch(cls, batch: SubmissionBatch, rate: float, submitted_on: Optional[date] = None) -> "ReceiptSummary":
        """Agrupa las unidades del lote por slot: una línea por nombre."""
        lines: List[ReceiptLine] = []
        seen = {}
        for unit in batch.units:
            if unit.slot_id in seen:
                line = lines[seen[unit.slot_id]]
                lines[seen[unit.slot_id]] = ReceiptLine(line.name, line.type, line.hissas + 1)
                continue
            seen[unit.slot_id] = len(lines)
            lines.append(ReceiptLine(unit.record.name, unit.record.type, 1))

        first = batch.units[0].record
        return cls(
            receipt_number=batch.receipt_number,
            billed_to=first.user_name,
            phone=first.phone,
            region=batch.region,
            rate=rate,
            submitted_on=submitted_on or date.today(),
            lines=lines,
        )


class ReceiptRenderer:
    """Dibuja un recibo de una página con reportlab."""

    def __init__(self, currency: str = "INR") -> None:
        self.currency = currency

    def format_amount(self, amount: float) -> str:
        return f"{self.currency} {amount:,.0f}"

    def render(self, receipt: ReceiptSummary, output: Union[str, BinaryIO]) -> None:
        """
        Escribe el recibo en `output` (ruta o buffer binario).

        Raises:
            Exception: si reportlab no puede construir el documento
        """
        styles = getSampleStyleSheet()
        title_style = styles["Heading1"]
        title_style.alignment = TA_CENTER

        story = [
            Paragraph("Qurbani Receipt", title_style),
            Spacer(1, 12),
            Paragraph(f"Receipt ID: QUR-{paragraph_text(receipt.receipt_number)}", styles["Normal"]),
            Paragraph(f"Date: {receipt.submitted_on.strftime('%d/%m/%Y')}", styles["Normal"]),
            Paragraph(f"Region: {receipt.region.label}", styles["Normal"]),
            Spacer(1, 12),
            Paragraph("Billed To:", styles["Heading3"]),
            Paragraph(paragraph_text(receipt.billed_to), styles["Normal"]),
        ]
        if receipt.phone:
            story.append(Paragraph(paragraph_text(receipt.phone), styles["Normal"]))
        story.append(Spacer(1, 18))

        story.append(self.names_table(receipt))
        story.append(Spacer(1, 18))

        totals = [
            ["Description", "Shares (Hissa)", "Rate per Share", "Total Amount"],
            [
                "Qurbani Shares",
                str(receipt.total_hissas),
                self.format_amount(receipt.rate),
                self.format_amount(receipt.total_amount),
            ],
        ]
        story.append(self._table(totals))

        try:
            doc = SimpleDocTemplate(output, pagesize=A4, title=f"QUR-{receipt.receipt_number}")
            doc.build(story)
            logger.debug("Receipt rendered receipt=%s hissas=%d", receipt.receipt_number, receipt.total_hissas)
        except Exception as e:
            logger.error("Error rendering receipt %s: %s", receipt.receipt_number, e)
            raise

    def names_table(self, receipt: ReceiptSummary) -> Table:
        """Una fila por nombre; el nombre va en un Paragraph para que haga wrap."""
        normal = getSampleStyleSheet()["Normal"]
        rows = [["Name", "Type", "Shares (Hissa)"]]
        for line in receipt.lines:
            rows.append([Paragraph(paragraph_text(line.name), normal), line.type.label, str(line.hissas)])
        return self._table(rows, col_widths=NAME_TABLE_WIDTHS)

    @staticmethod
    def _table(rows: list, col_widths: Optional[List[float]] = None) -> Table:
        table = Table(rows, colWidths=col_widths, hAlign="LEFT")
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ]))
        return table
