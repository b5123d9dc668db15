"""Layout of an FM routing matrix as a grid of operator boxes and connecting paths."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field

Point = tuple[float, float]


def add_if_unique(items, member) -> None:
    """Append member to items unless an equal element is already there."""
    if member not in items:
        items.append(member)


@dataclass(eq=False)
class OpInfo:
    """An operator's place in the routing graph; equal when indices match."""

    index: int
    sources: list = field(default_factory=list, repr=False)
    dests: list = field(default_factory=list, repr=False)
    grid_x: int = 0
    grid_y: int = 0
    is_active: bool = False
    has_self_mod: bool = False
    mod_order: int = sys.maxsize

    def __eq__(self, other):
        if isinstance(other, OpInfo):
            return self.index == other.index
        return NotImplemented

    def __hash__(self):
        return hash(self.index)


class AlgorithmGraph:
    """Arranges routed operators into rows, from unmodulated sources down to outputs."""

    def __init__(self, routing=None, audible=None, num_operators: int = 6) -> None:
        self.num_operators = num_operators
        if routing is None:
            routing = [[False] * num_operators for _ in range(num_operators)]
        if audible is None:
            audible = [False] * num_operators
        self.routing = [[bool(x) for x in row] for row in routing]
        if len(self.routing) != num_operators or any(
            len(row) != num_operators for row in self.routing
        ):
            raise ValueError(f"routing must be a {num_operators}x{num_operators} matrix")
        self.audible = [bool(x) for x in audible]
        if len(self.audible) != num_operators:
            raise ValueError(f"audible must hold {num_operators} flags")
        self.op_info = [OpInfo(i) for i in range(num_operators)]
        self.to_draw: list[OpInfo] = []
        self.bottom_level: list[OpInfo] = []
        self.top_level: list[OpInfo] = []
        self.grid_rows: list[list[OpInfo]] = []
        self.unit_width = 7
        self.cell_side_length = 55.0
        self.routing_stroke_width = 0.75
        self.op_text_size = 15.0
        self.top_left: Point = (0.0, 0.0)
        self.boxes: list[tuple[int, int, int]] = []
        self.paths: list[list[Point]] = []

    def update_op_info(self) -> None:
        """Rebuild the graph from the routing matrix and pick top and bottom rows."""
        self.op_info = [OpInfo(i) for i in range(self.num_operators)]
        self.to_draw = []
        self.bottom_level = []
        self.top_level = []
        for s, row in enumerate(self.routing):
            for d, routed in enumerate(row):
                if not routed:
                    continue
                source, dest = self.op_info[s], self.op_info[d]
                if s != d:
                    add_if_unique(dest.sources, source)
                    add_if_unique(source.dests, dest)
                else:
                    source.has_self_mod = True
                source.is_active = True
                dest.is_active = True
                add_if_unique(self.to_draw, dest)
                add_if_unique(self.to_draw, source)
        for op in self.to_draw:
            if self.audible[op.index]:
                self.bottom_level.append(op)
            if not op.sources and op not in self.bottom_level:
                self.top_level.append(op)

    def calculate_rows(self) -> int:
        """Fill grid_rows from the top level down and return the row count.

        Raises ValueError when the routing holds a cycle that never reaches
        the bottom row.
        """
        num_rows = 0
        self.grid_rows = []
        if not self.to_draw:
            return 0
        check_for_silent = False
        silent_found = False
        if self.bottom_level:
            num_rows += 1
        else:
            check_for_silent = True
        for op in self.to_draw:
            if not op.dests and not self.audible[op.index]:
                add_if_unique(self.bottom_level, op)
                silent_found = True
        if silent_found and check_for_silent:
            num_rows += 1
        if self.top_level:
            num_rows += 1
        current = self.top_level
        for _ in range(self.num_operators + 1):
            self.grid_rows.append(list(current))
            found_bottom = all(
                dest in self.bottom_level for op in current for dest in op.dests
            )
            if found_bottom:
                break
            new_row: list[OpInfo] = []
            for op in current:
                for dest in op.dests:
                    if dest not in self.bottom_level and dest is not op:
                        add_if_unique(new_row, dest)
            current = new_row
            num_rows += 1
        else:
            raise ValueError("routing contains a cycle that never reaches an output")
        self.grid_rows.append(list(self.bottom_level))
        return num_rows

    def layout(self, height) -> list[tuple[int, int, int]]:
        """Place operators on a grid fitted to height; return (column, row, index) boxes."""
        self.update_op_info()
        row_count = self.calculate_rows()
        largest = max([row_count] + [len(row) for row in self.grid_rows]) + 2
        self.unit_width = largest
        self.op_text_size = 60.0 / largest
        self.cell_side_length = height / largest
        self.boxes = []
        for row_number, row in enumerate(self.grid_rows, start=1):
            for column, op in enumerate(row, start=1):
                op.grid_x = column
                op.grid_y = row_number
                self.boxes.append((column, row_number, op.index))
        self.paths = []
        for source in self.to_draw:
            start = (source.grid_x, source.grid_y)
            if source.has_self_mod:
                self.add_path(start, start)
            for dest in source.dests:
                self.add_path(start, (dest.grid_x, dest.grid_y))
        return self.boxes

    def cell_center(self, x, y) -> Point:
        cell = self.cell_side_length
        left, top = self.top_left
        return (left + (1 + x) * cell - cell / 2.0, top + (1 + y) * cell - cell / 2.0)

    def add_path(self, start, end) -> list[Point]:
        """Record a line between two cells, or a closed loop for self-modulation."""
        p1 = self.cell_center(*start)
        if tuple(start) != tuple(end):
            path = [p1, self.cell_center(*end)]
        else:
            inset = self.cell_side_length * 0.4
            left_x = p1[0] - inset
            top_y = p1[1] - inset
            path = [p1, (left_x, p1[1]), (left_x, top_y), (p1[0], top_y), p1]
        self.paths.append(path)
        return path