"""Readable listing of an assembled Program."""
from computador_pila.model.isa import OperandKind, Program


def format_instruction(program: Program, pc: int) -> str:
    """Instruction at pc, with the label name for jump targets when there is one."""
    inst = program[pc]
    if inst.spec.operand is OperandKind.TARGET:
        names = program.labels_at().get(inst.operand)
        if names:
            return f"{inst} ({sorted(names)[0]})"
    return str(inst)


def listing(program: Program) -> str:
    at = program.labels_at()
    out = []
    for pc in range(len(program)):
        for name in sorted(at.get(pc, ())):
            out.append(f"{name}:")
        out.append(f"  {pc:04d}  {format_instruction(program, pc):<24} ; line {program.lines[pc]}")
    # labels pointing just past the last instruction
    for name in sorted(at.get(len(program), ())):
        out.append(f"{name}:")
    return '\n'.join(out)
