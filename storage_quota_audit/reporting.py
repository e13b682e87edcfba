# Console tables and Excel export for the storage quota audit

import logging
from datetime import datetime

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from .utils import banner

NO_EXCEEDANCE_NOTICE = "No storage accounts exceeded their threshold."

COLUMNS = [
    'Subscription', 'Subscription ID', 'Storage Account', 'Resource Group',
    'Location', 'Used (GB)', 'Threshold (GB)', 'Exceeds'
]

HEADER_FILL = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
EXCEEDS_FILL = PatternFill(start_color="FFE6E6", end_color="FFE6E6", fill_type="solid")


def sort_records(records):
    """Order records by subscription name, then account name"""
    return sorted(records, key=lambda r: (r.subscription_name, r.account_name))


def _record_row(record):
    return [
        record.subscription_name,
        record.subscription_id,
        record.account_name,
        record.resource_group,
        record.location,
        record.used_gb,
        record.threshold_gb,
        "Yes" if record.exceeds else "No",
    ]


def records_to_dataframe(records):
    return pd.DataFrame([_record_row(r) for r in sort_records(records)], columns=COLUMNS)


def render_usage_table(records):
    """Render records as a plain-text table"""
    df = records_to_dataframe(records)
    return df.to_string(index=False, float_format=lambda v: f"{v:.2f}")


def render_report(result):
    """Full console report: all accounts, exceeding accounts, skipped items"""
    sections = [
        banner(f"ALL STORAGE ACCOUNTS ({len(result.all_records)})"),
        render_usage_table(result.all_records) if result.all_records else "No storage accounts were audited.",
        "",
        banner(f"ACCOUNTS EXCEEDING THRESHOLD ({len(result.exceeding_records)})"),
    ]
    if result.exceeding_records:
        sections.append(render_usage_table(result.exceeding_records))
    else:
        sections.append(NO_EXCEEDANCE_NOTICE)

    if result.skipped:
        sections.append("")
        sections.append(banner(f"SKIPPED ({len(result.skipped)})"))
        for item in result.skipped:
            sections.append(f"  [{item.scope}] {item.subscription_name} / {item.item_name}: {item.reason}")

    return "\n".join(sections)


def _write_records_sheet(sheet, records):
    for col, header in enumerate(COLUMNS, start=1):
        cell = sheet.cell(row=1, column=col, value=header)
        cell.font = Font(bold=True, color="FFFFFF")
        cell.fill = HEADER_FILL

    for row, record in enumerate(sort_records(records), start=2):
        for col, value in enumerate(_record_row(record), start=1):
            cell = sheet.cell(row=row, column=col, value=value)
            if record.exceeds:
                cell.fill = EXCEEDS_FILL

    # Auto-adjust column widths
    for column in sheet.columns:
        max_length = max(len(str(cell.value)) for cell in column if cell.value is not None)
        sheet.column_dimensions[get_column_letter(column[0].column)].width = min((max_length + 2) * 1.2, 50)


def add_watermark_to_sheet(sheet, watermark_text):
    """Add watermark to sheet"""
    row = sheet.max_row + 2
    cell = sheet.cell(row=row, column=1)
    cell.value = watermark_text
    cell.font = Font(italic=True, color="888888", size=10)
    cell.alignment = Alignment(horizontal="left", vertical="center")


def export_excel_report(result, output_file):
    """Write the all/exceeding tables to an Excel workbook"""
    logger = logging.getLogger(__name__)

    workbook = Workbook()
    workbook.remove(workbook.active)

    _write_records_sheet(workbook.create_sheet("All Accounts"), result.all_records)

    exceeding_sheet = workbook.create_sheet("Exceeding Accounts")
    if result.exceeding_records:
        _write_records_sheet(exceeding_sheet, result.exceeding_records)
    else:
        exceeding_sheet['A1'] = NO_EXCEEDANCE_NOTICE
        exceeding_sheet['A1'].font = Font(bold=True)

    watermark_text = f"Storage Quota Audit - Generated on {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}"
    for sheet in workbook.worksheets:
        add_watermark_to_sheet(sheet, watermark_text)

    try:
        workbook.save(output_file)
    except OSError as e:
        logger.error(f"Error saving Excel report to {output_file}: {e}")
        return False

    logger.info(f"Excel report saved to: {output_file}")
    return True
