"""Tests de las acciones del controlador y exportación de memoria"""
import csv

import pytest
from openpyxl import load_workbook

from computador_pila import assemble
from computador_pila.controller.computer import Action, Data


@pytest.fixture(autouse=True)
def _no_session():
    yield
    Action.stop_stepping()


def test_assemble_file_and_execute(tmp_path):
    src = tmp_path / "p.asm"
    src.write_text("push 2\npush 3\nmul\nprint\n", encoding="utf-8")
    result = Action.execute_program(Action.assemble_file(src))
    assert result.output == "6"


def test_format_result_shows_final_stack_without_output():
    result = Action.execute_program(assemble("push 1\npush 2\n"))
    assert Action.format_result(result) == "Final stack: [1, 2]\n"


def test_format_result_with_fault():
    result = Action.execute_program(assemble("push 1\nprint\npop\n"))
    assert Action.format_result(result) == (
        "1\nError: StackUnderflow at pc 2 (needs 1 value(s), stack has 0)\n")


def test_stepping_session():
    Action.start_stepping(assemble("push 4\nloop:\njump fin\nfin:\nhalt\n"))
    assert Action.is_stepping()
    assert Action.step() == ("push 4", False)
    assert Action.step() == ("jump 2 (fin)", False)
    assert Action.step() == ("halt", True)
    assert not Action.is_stepping()
    assert Action.current_result().stack == (4,)
    Action.stop_stepping()
    with pytest.raises(RuntimeError):
        Action.step()


def test_step_without_session():
    with pytest.raises(RuntimeError):
        Action.step()


def test_format_memory_value_modes():
    fmt = Data.Memory_D.format_memory_value
    assert fmt(-1, "bin") == "1" * 64
    assert fmt(5, "bin") == "0" * 61 + "101"
    assert fmt(-1, "hex") == "0x" + "f" * 16
    assert fmt(255, "hex") == "0xff"
    assert fmt(-7, "decimal") == "-7"
    with pytest.raises(ValueError):
        fmt(1, "octal")


def test_save_memory_csv(tmp_path):
    result = Action.execute_program(assemble("push -3\nstore 2\n"))
    out = tmp_path / "mem.csv"
    Data.Memory_D.save_memory_csv(result.memory, out, "decimal")
    with open(out, encoding="utf-8", newline="") as f:
        rows = list(csv.reader(f))
    assert rows[0] == ["Dirección", "Contenido"]
    assert len(rows) == 1 + 1024
    assert rows[3] == ["2", "-3"]


def test_save_modified_memory_xlsx(tmp_path):
    result = Action.execute_program(assemble("push 7\nstore 10\npush 255\nstore 3\n"))
    path = Data.Memory_D.save_modified_memory(result.memory, tmp_path / "mem", "hex")
    assert path.suffix == ".xlsx"
    ws = load_workbook(path).active
    rows = list(ws.iter_rows(values_only=True))
    assert rows == [("Dirección", "Contenido"), (3, "0xff"), (10, "0x7")]


def test_memory_range_content():
    result = Action.execute_program(assemble("push 1\nstore 1\n"))
    get = Data.Memory_D.get_memory_range_content
    assert get(result.memory, 0, 2, "decimal") == ["0", "1", "0"]
    with pytest.raises(ValueError):
        get(result.memory, 3, 2, "decimal")
    with pytest.raises(ValueError):
        get(result.memory, 0, 1024, "decimal")
