import os
from pathlib import Path
from typing import Mapping, Optional

import pandas as pd


def ensure_output_directory(directory):
    """
    Ensure the output directory exists. If it doesn't, create it.

    Args:
        directory (str): Path to the output directory.
    """
    os.makedirs(directory, exist_ok=True)


def format_duration(seconds):
    """
    Format a duration in seconds into a human-readable string.

    Args:
        seconds (float): Duration in seconds.
    Returns:
        str: Formatted duration string.
    """
    if seconds < 60:
        return f"{seconds:.2f} sec"
    elif seconds < 3600:
        return f"{seconds / 60:.2f} min"
    else:
        return f"{seconds / 3600:.2f} hr"


def save_sweep_tables(tables: Mapping[str, pd.DataFrame], excel_filename):
    """
    Save trajectory and sweep tables to an Excel workbook, one sheet per table.

    Args:
        tables (Mapping[str, pd.DataFrame]): Sheet name -> table. Names are cut to 31 characters.
        excel_filename (str): Path to the output Excel file.
    """
    ensure_output_directory(os.path.dirname(os.path.abspath(excel_filename)))
    with pd.ExcelWriter(excel_filename, engine='xlsxwriter') as writer:
        for name, df in tables.items():
            # Excel sheet names must be <= 31 chars
            df.to_excel(writer, sheet_name=str(name)[:31], index=False)


def _section_of(filename: str) -> str:
    base_name = os.path.splitext(filename)[0]
    return base_name.split('_', 1)[0] if '_' in base_name else "general"


def create_report(results_dir: str,
                  output_file: str = "splicekin_report.html",
                  tables: Optional[Mapping[str, pd.DataFrame]] = None,
                  title: str = "Fraction unspliced as a proxy for splicing rate"):
    """
    Creates a single HTML report from the figures inside the results directory.

    Figures are grouped by the prefix before the first underscore of their file name
    (e.g. `sigma_sweep_fraction.png` goes to section "sigma"). Optional summary tables
    are rendered after the figures.

    Args:
        results_dir (str): Directory holding the PNG figures; the report is written here too.
        output_file (str): Name of the generated report file.
        tables (Mapping[str, pd.DataFrame]): Optional heading -> summary table.
        title (str): Page heading.

    Returns:
        str: Path of the written report.
    """
    figures = sorted(
        f for f in os.listdir(results_dir)
        if os.path.isfile(os.path.join(results_dir, f)) and f.endswith(".png")
    )
    sections = {}
    for filename in figures:
        sections.setdefault(_section_of(filename), []).append(filename)

    html_parts = [
        "<html>",
        "<head>",
        "<meta charset='UTF-8'>",
        f"<title>{title}</title>",
        "<style>",
        "body { font-family: Arial, sans-serif; margin: 20px; }",
        "h1 { color: #333; }",
        "h2 { color: #555; font-size: 1.8em; border-bottom: 1px solid #ccc; padding-bottom: 5px; }",
        "h3 { color: #666; font-size: 1.2em; margin-top: 10px; margin-bottom: 10px; }",
        ".plot-container {",
        "  display: grid;",
        "  grid-template-columns: repeat(2, 600px);",
        "  column-gap: 20px;",
        "  row-gap: 40px;",
        "  margin-bottom: 40px;",
        "}",
        "img { width: 100%; object-fit: contain; border: none; }",
        "table { border-collapse: collapse; margin-top: 10px; }",
        "th, td { border: 1px solid #ccc; padding: 6px; text-align: right; }",
        "</style>",
        "</head>",
        "<body>",
        f"<h1>{title}</h1>",
        "<pre style=\"font-size: 0.9em; color: #444; background-color: #f9f9f9; padding: 10px; border-left: 4px solid #ccc;\">",
        "τ = transcription rate | σ = splicing rate | λ = mRNA decay rate\n",
        "P = pre-mRNA (unspliced) | M = mRNA (spliced) | f = P / (P + M) fraction unspliced",
        "</pre>",
    ]

    for section, files in sections.items():
        html_parts.append(f"<h2>{section}</h2>")
        html_parts.append('<div class="plot-container">')
        for filename in files:
            uri_path = Path(results_dir, filename).resolve().as_uri()
            tokens = [token for token in os.path.splitext(filename)[0].split('_') if token]
            caption = " ".join(tokens).upper()
            html_parts.append(
                f'<div class="plot-item"><h3>{caption}</h3><img src="{uri_path}" alt="{filename}"></div>'
            )
        html_parts.append('</div>')

    for heading, df in (tables or {}).items():
        html_parts.append(f"<h2>{heading}</h2>")
        html_parts.append(df.to_html(index=False, float_format=lambda v: f"{v:.4g}"))

    html_parts.append("</body>")
    html_parts.append("</html>")

    output_path = os.path.join(results_dir, output_file)
    with open(output_path, "w", encoding="utf-8") as f:
        f.write("\n".join(html_parts))
    return output_path
