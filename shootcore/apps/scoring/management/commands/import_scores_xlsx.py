from __future__ import annotations

import csv
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from openpyxl import load_workbook

from shootcore.apps.events.models import Tournament
from shootcore.apps.scoring.services.importer import canonical_row, import_scores

SHEET_NAMES = ("Shooter History", "Shooter Scores")
# columnas que delatan una fila de cabecera real
HEADER_MARKERS = {"shooter_id", "shooter_name", "first_name", "last_name"}


def _headers_of(values) -> List[str]:
    return [str(v).strip() if v is not None else "" for v in values]


def _looks_like_header(headers: List[str]) -> bool:
    row = canonical_row({h: "x" for h in headers if h})
    return bool(HEADER_MARKERS & set(row)) and "targets_hit" in row


def read_sheet_rows(ws) -> List[Dict[str, Any]]:
    """
    Devuelve las filas como dicts {cabecera: valor}.
    Si la fila 1 es un título (no trae cabeceras reconocibles) se usa la fila 2.
    """
    rows = list(ws.iter_rows(values_only=True))
    if not rows:
        return []
    header_idx = 0
    headers = _headers_of(rows[0])
    if not _looks_like_header(headers) and len(rows) > 1:
        header_idx = 1
        headers = _headers_of(rows[1])
    if not _looks_like_header(headers):
        raise CommandError(f"Cabecera no reconocida en la hoja '{ws.title}': {headers}")

    out = []
    for vals in rows[header_idx + 1:]:
        if all(v in (None, "") for v in vals):
            continue
        out.append(dict(zip(headers, vals)))
    return out


def pick_sheet(wb):
    present = [name for name in SHEET_NAMES if name in wb.sheetnames]
    with_data = [name for name in present if wb[name].max_row > 1]
    if len(with_data) > 1:
        raise CommandError(
            f"El archivo trae datos en {' y '.join(repr(n) for n in with_data)}; deja solo una de las hojas."
        )
    if with_data:
        return wb[with_data[0]]
    raise CommandError(f"El archivo debe tener una hoja {' o '.join(repr(n) for n in SHEET_NAMES)} con datos.")


class Command(BaseCommand):
    help = "Importa scores desde un .xlsx (hoja 'Shooter History' o 'Shooter Scores'); genera reporte CSV por fila."

    def add_arguments(self, parser):
        parser.add_argument("xlsx_path", type=str, help="Ruta al archivo .xlsx con los scores")
        parser.add_argument("--tournament", required=True, help="Slug o id del torneo destino")
        parser.add_argument("--sheet", type=str, default=None, help="Forzar una hoja por nombre")
        parser.add_argument("--dry-run", action="store_true", help="Procesa todo y revierte al final")
        parser.add_argument("--report", type=str, default="", help="Ruta del CSV de reporte")

    def handle(self, *args, **options):
        xlsx_path = Path(options["xlsx_path"])
        dry_run = options.get("dry_run", False)

        if not xlsx_path.exists():
            raise CommandError(f"Archivo no encontrado: {xlsx_path}")

        ref = str(options["tournament"])
        tournament = Tournament.objects.filter(slug=ref).first()
        if tournament is None and ref.isdigit():
            tournament = Tournament.objects.filter(pk=int(ref)).first()
        if tournament is None:
            raise CommandError(f"Torneo '{ref}' no existe.")

        wb = load_workbook(filename=str(xlsx_path), data_only=True, read_only=False)
        if options.get("sheet"):
            if options["sheet"] not in wb.sheetnames:
                raise CommandError(f"Hoja '{options['sheet']}' no existe. Hojas: {wb.sheetnames}")
            ws = wb[options["sheet"]]
        else:
            ws = pick_sheet(wb)

        rows = read_sheet_rows(ws)
        self.stdout.write(f"Hoja '{ws.title}': {len(rows)} filas")

        with transaction.atomic():
            result = import_scores(tournament, rows, first_row=1)
            if dry_run:
                transaction.set_rollback(True)

        report_path = Path(options["report"]) if options.get("report") else (
            Path.cwd() / f"score_import_report_{datetime.now().strftime('%Y%m%d_%H%M%S')}.csv"
        )
        if not dry_run:
            with report_path.open("w", newline="", encoding="utf-8") as fp:
                writer = csv.writer(fp)
                writer.writerow(["row", "status", "athlete_id", "score_id", "result", "error", "detail"])
                for r in result["rows"]:
                    writer.writerow([
                        r["row"],
                        r["status"],
                        r.get("athlete_id", ""),
                        r.get("score_id", ""),
                        r.get("result", ""),
                        r.get("error", ""),
                        r.get("detail", ""),
                    ])

        self.stdout.write(self.style.SUCCESS(f"Filas procesadas: {result['total']}"))
        self.stdout.write(self.style.SUCCESS(
            f"OK: {result['ok']}  ·  ERRORES: {result['errors']}  ·  "
            f"nuevos: {result['created']}  ·  actualizados: {result['updated']}  ·  sin cambios: {result['unchanged']}"
        ))
        if dry_run:
            self.stdout.write(self.style.WARNING("Dry-run: cambios revertidos, no se escribió reporte."))
        else:
            self.stdout.write(self.style.SUCCESS(f"Reporte: {report_path}"))
