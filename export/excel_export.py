"""Excel-Export der Kursverwaltung (openpyxl)."""

from pathlib import Path

from config.schema import KursverwaltungConfig
from models.entities import TAB_ORDER, EntityType, get_schema
from sync.loader import Snapshot
from sync.resolver import ReferenceResolver

from export.helpers import COLORS, cell_value, today_str


class ExcelExporter:
    """Exportiert die geladenen Tabs in eine Excel-Datei (ein Sheet je Tab)."""

    # Spaltenbreiten (Excel-Einheiten)
    COL_MIN_W = 10
    COL_MAX_W = 45

    # Zeilenhöhen (Punkte)
    ROW_HEADER_H = 22

    def __init__(self, snapshots: dict[EntityType, Snapshot],
                 config: KursverwaltungConfig):
        self.snapshots = snapshots
        self.config = config
        self.display = config.display

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    def export(self, output_path: Path) -> None:
        """Erstellt die Excel-Datei: Übersicht + ein Sheet je geladenem Tab."""
        from openpyxl import Workbook
        wb = Workbook()
        wb.remove(wb.active)   # Leeres Standard-Sheet entfernen

        self._sheet_uebersicht(wb)
        for et in TAB_ORDER:
            if et in self.snapshots:
                self._sheet_entity(wb, et, self.snapshots[et])

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)

    # ─── Style-Helpers ────────────────────────────────────────────────────────

    def _fill(self, hex_color: str):
        from openpyxl.styles import PatternFill
        return PatternFill(start_color=hex_color, end_color=hex_color, fill_type="solid")

    def _center_align(self, wrap: bool = True):
        from openpyxl.styles import Alignment
        return Alignment(wrap_text=wrap, horizontal="center", vertical="center")

    def _thin_border(self):
        from openpyxl.styles import Border, Side
        s = Side(border_style="thin", color="BBBBBB")
        return Border(left=s, right=s, top=s, bottom=s)

    def _write_header_row(self, ws, headers: list[str], row: int = 1) -> None:
        from openpyxl.styles import Font
        fill = self._fill(COLORS["header"])
        border = self._thin_border()
        for col, text in enumerate(headers, 1):
            cell = ws.cell(row=row, column=col, value=text)
            cell.fill = fill
            cell.font = Font(bold=True, color="FFFFFF", size=10)
            cell.alignment = self._center_align(wrap=False)
            cell.border = border
        ws.row_dimensions[row].height = self.ROW_HEADER_H

    def _autosize(self, ws) -> None:
        """Spaltenbreite nach längstem Inhalt, begrenzt auf COL_MAX_W."""
        from openpyxl.utils import get_column_letter
        for col_idx, column in enumerate(ws.iter_cols(), 1):
            longest = max((len(str(c.value)) for c in column if c.value is not None),
                          default=0)
            width = min(max(longest + 2, self.COL_MIN_W), self.COL_MAX_W)
            ws.column_dimensions[get_column_letter(col_idx)].width = width

    # ─── Sheets ───────────────────────────────────────────────────────────────

    def _sheet_uebersicht(self, wb) -> None:
        from openpyxl.styles import Font
        ws = wb.create_sheet(title="Übersicht", index=0)

        ws.cell(row=1, column=1, value=self.config.organisation_name).font = Font(bold=True, size=14)
        ws.cell(row=2, column=1, value=f"Erstellt: {today_str()}")

        self._write_header_row(ws, ["Bereich", "Datensätze"], row=4)
        border = self._thin_border()
        row = 5
        for et in TAB_ORDER:
            snap = self.snapshots.get(et)
            if snap is None:
                continue
            ws.cell(row=row, column=1, value=get_schema(et).label).border = border
            ws.cell(row=row, column=2, value=len(snap.primary)).border = border
            row += 1
        self._autosize(ws)

    def _sheet_entity(self, wb, entity_type: EntityType, snapshot: Snapshot) -> None:
        schema = get_schema(entity_type)
        ws = wb.create_sheet(title=schema.label)
        resolver = ReferenceResolver(schema, snapshot, self.display.sentinel)

        headers = ["ID"] + [f.label for f in schema.fields]
        self._write_header_row(ws, headers)
        ws.freeze_panes = "A2"

        border = self._thin_border()
        sentinel_fill = self._fill(COLORS["sentinel"])
        zebra = self._fill(COLORS["zebra"])

        for row, record in enumerate(snapshot.primary, 2):
            ws.cell(row=row, column=1, value=record.record_id).border = border
            for col, spec in enumerate(schema.fields, 2):
                value = cell_value(spec, record, resolver, self.display)
                cell = ws.cell(row=row, column=col, value=value)
                cell.border = border
                if spec.is_reference and value == self.display.sentinel:
                    cell.fill = sentinel_fill
                elif spec.name == "bezahlt":
                    cell.fill = self._fill(COLORS["bezahlt" if value == "Ja" else "offen"])
                elif row % 2 == 1:
                    cell.fill = zebra
        self._autosize(ws)
