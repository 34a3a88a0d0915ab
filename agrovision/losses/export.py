from datetime import datetime
from io import BytesIO
from typing import Iterable, Tuple

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from agrovision.db import models
from agrovision.losses.schemas import LossReport

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

DETAIL_HEADERS = [
    "Data ocorrencia",
    "Tipo",
    "Descricao",
    "Quantidade afetada",
    "Unidade",
    "Valor estimado",
    "Cultura",
    "Praga",
    "Area",
    "Cliente",
]


def _autosize(ws, columns: int, width: int = 22) -> None:
    for idx in range(1, columns + 1):
        ws.column_dimensions[get_column_letter(idx)].width = width


def build_report_workbook(report: LossReport, losses: Iterable[models.Loss]) -> Tuple[bytes, str]:
    wb = Workbook()
    summary = wb.active
    summary.title = "RESUMO"
    summary.append(["Relatorio financeiro de perdas"])
    summary["A1"].font = Font(bold=True)
    summary.append(["Periodo", report.dataInicio.isoformat(), report.dataFim.isoformat()])
    summary.append(["Cliente", report.clienteId or "todos"])
    summary.append(["Valor total", report.valorTotal])
    summary.append(["Quantidade", report.quantidade])
    summary.append([])
    summary.append(["Tipo", "Valor", "Quantidade"])
    for cell in summary[summary.max_row]:
        cell.font = Font(bold=True)
    for kind, totals in sorted(report.porTipo.items()):
        summary.append([kind, totals.valor, totals.quantidade])
    summary.append([])
    summary.append(["Gerado em", datetime.utcnow().isoformat()])
    _autosize(summary, 3)

    detail = wb.create_sheet("PERDAS")
    detail.append(DETAIL_HEADERS)
    for cell in detail[1]:
        cell.font = Font(bold=True)
    detail.freeze_panes = "A2"
    for loss in losses:
        detail.append(
            [
                loss.occurred_on,
                loss.kind,
                loss.description,
                loss.quantity,
                loss.unit,
                loss.estimated_value,
                loss.crop_id,
                loss.pest_id,
                loss.area_id,
                loss.client_id,
            ]
        )
    _autosize(detail, len(DETAIL_HEADERS))

    out = BytesIO()
    wb.save(out)
    filename = f"relatorio_perdas_{report.dataInicio:%Y%m%d}_{report.dataFim:%Y%m%d}.xlsx"
    return out.getvalue(), filename
