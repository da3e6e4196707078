"""
Server-rendered form widgets.

A Form declares fields and sublists; the Jinja2 page template renders it.
Operations used by the order lister:
    declare field     Form.add_field / Sublist.add_field
    set default       Field.default_value
    enumerate options Field.add_select_option / Field.options
    set cell value    Sublist.set_sublist_value
"""

from dataclasses import dataclass, field


@dataclass
class SelectOption:
    value: str
    text: str


@dataclass
class Field:
    id: str
    label: str
    type: str = "text"          # text / select
    source: str | None = None   # reference list backing a select
    default_value: str = ""
    options: list[SelectOption] = field(default_factory=list)

    def add_select_option(self, value: str, text: str) -> None:
        self.options.append(SelectOption(value, text))

    @property
    def selected_text(self) -> str:
        for option in self.options:
            if option.value == self.default_value:
                return option.text
        return ""


@dataclass
class Sublist:
    id: str
    label: str
    fields: list[Field] = field(default_factory=list)
    lines: list[dict[str, str]] = field(default_factory=list)

    def add_field(self, id: str, label: str, type: str = "text") -> Field:
        f = Field(id, label, type)
        self.fields.append(f)
        return f

    def set_sublist_value(self, id: str, line: int, value: str) -> None:
        if id not in {f.id for f in self.fields}:
            raise KeyError(f"Sublist {self.id} has no field {id!r}")
        while len(self.lines) <= line:
            self.lines.append({})
        self.lines[line][id] = value

    @property
    def line_count(self) -> int:
        return len(self.lines)


@dataclass
class Form:
    title: str
    fields: list[Field] = field(default_factory=list)
    sublists: list[Sublist] = field(default_factory=list)
    buttons: list[tuple[str, str]] = field(default_factory=list)   # (kind, label)

    def add_field(self, id: str, label: str, type: str = "text", source: str | None = None) -> Field:
        f = Field(id, label, type, source)
        self.fields.append(f)
        return f

    def get_field(self, id: str) -> Field | None:
        return next((f for f in self.fields if f.id == id), None)

    def add_sublist(self, id: str, label: str) -> Sublist:
        s = Sublist(id, label)
        self.sublists.append(s)
        return s

    def get_sublist(self, id: str) -> Sublist | None:
        return next((s for s in self.sublists if s.id == id), None)

    def add_submit_button(self, label: str = "Submit") -> None:
        self.buttons.append(("submit", label))

    def add_reset_button(self, label: str = "Reset") -> None:
        self.buttons.append(("reset", label))
