import pandas as pd

from utils.display import ensure_output_directory, format_duration, save_sweep_tables, create_report


def test_ensure_output_directory_creates_nested_directories(tmp_path):
    nested_dir = tmp_path / "nested" / "subdir" / "results"
    ensure_output_directory(str(nested_dir))
    assert nested_dir.exists()


def test_format_duration_seconds():
    assert "sec" in format_duration(45.678)


def test_format_duration_minutes():
    assert "min" in format_duration(120)


def test_format_duration_hours():
    assert "hr" in format_duration(7200)


def test_save_sweep_tables_one_sheet_per_table(tmp_path):
    traj = pd.DataFrame({"time": [0.0, 0.5], "P": [0.0, 0.25], "M": [0.0, 0.1]})
    summary = pd.DataFrame({"sigma": [0.5, 1.0], "fraction_unspliced_steady": [0.1667, 0.0909]})
    excel_filename = tmp_path / "out" / "results.xlsx"
    long_name = "a_sheet_name_longer_than_thirty_one_chars"
    save_sweep_tables({"trajectory": traj, long_name: summary}, str(excel_filename))
    assert excel_filename.exists()
    sheets = pd.read_excel(excel_filename, sheet_name=None)
    assert set(sheets) == {"trajectory", long_name[:31]}
    pd.testing.assert_frame_equal(sheets["trajectory"], traj)


def test_create_report(tmp_path):
    for name in ["base_timecourse.png", "sigma_fraction_by_sigma.png", "sigma_species.png"]:
        with open(tmp_path / name, "wb") as f:
            f.write(b"\x89PNG\r\n\x1a\n")
    summary = pd.DataFrame({"sigma": [0.5, 1.0], "P_end": [2.0, 1.0]})
    path = create_report(str(tmp_path), output_file="test_report.html", tables={"σ sweep": summary})
    assert path.endswith("test_report.html")
    with open(path, "r", encoding="utf-8") as f:
        content = f.read()
    assert "<h2>base</h2>" in content
    assert "<h2>sigma</h2>" in content
    assert "SIGMA SPECIES" in content
    assert "<h2>σ sweep</h2>" in content
    assert "<table" in content
