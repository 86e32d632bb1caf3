"""Shared fixtures: sample reference and sales files written to tmp_path."""
import pytest

from salesreport.etl.config import Config


def write_lines(path, lines):
    path.write_text("".join(line + "\n" for line in lines), encoding="utf-8")
    return str(path)


@pytest.fixture
def data_dir(tmp_path):
    write_lines(tmp_path / "productos.txt", [
        "P1;Widget;10.00",
        "P2;Gadget;20,00",
        "P3;Gizmo;5.5",
    ])
    write_lines(tmp_path / "salesmenInfo.txt", [
        "CC;1001;Ana;Ruiz",
        "CC;1002;Luis;Gomez",
    ])
    return tmp_path


@pytest.fixture
def config(data_dir):
    return Config(DATA_DIR=str(data_dir))


@pytest.fixture
def sales_file(data_dir):
    def _make(name, lines):
        return write_lines(data_dir / name, lines)
    return _make
