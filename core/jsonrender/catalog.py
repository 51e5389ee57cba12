"""Component catalog: the registry of kinds the engine can validate and render.

The registry is a table keyed by kind. Each entry declares the kind's props
contract (as `PropField` values), the dataclass the props convert into, the
renderer, and whether the kind is a container. The validator and the render
engine only ever look kinds up here, so adding a kind means registering a new
`ComponentSpec`; neither the validator nor the engine changes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Iterable, get_args

from . import widgets
from .conditions import OPERATORS
from .fields import (
    ANY,
    BOOLEAN,
    NUMBER,
    RECORD,
    STRING,
    ListOf,
    ObjectOf,
    PropField,
    ScalarShape,
    enum,
    optional,
)
from .schema import (
    ActionButtonProps,
    AlertItemProps,
    AlertType,
    BarChartProps,
    ButtonVariant,
    CardProps,
    ChartColor,
    ChartSeries,
    ColumnFormat,
    ConditionalProps,
    ConfirmPrompt,
    DataTableProps,
    GridProps,
    Icon,
    KpiCardProps,
    LineChartProps,
    ProgressCardProps,
    QuickAction,
    QuickActionsProps,
    Severity,
    Size,
    StackAlign,
    StackDirection,
    StackProps,
    StatCardProps,
    TableColumn,
    TextBlockProps,
    TextVariant,
    Trend,
    ValueFormat,
    Variant,
)
from .widgets import Renderer


@dataclass(frozen=True, slots=True)
class ComponentSpec:
    """Describe a renderable component kind.

    Args:
        kind: Stable kind tag (the wire `component` field).
        props_type: Dataclass the validated props convert into.
        fields: Declared props, in documentation order.
        renderer: Function producing the kind's output node.
        container: Whether the kind owns child sequences.
        children_required: Whether a container must declare `children`.
        accepts_fallback: Whether the kind accepts a `fallback` sequence.
        summary: One-line description used in the generator catalog.
    """

    kind: str
    props_type: type
    fields: tuple[PropField, ...]
    renderer: Renderer
    container: bool = False
    children_required: bool = False
    accepts_fallback: bool = False
    summary: str = ""


class ComponentRegistry:
    """Lookup table of component kinds."""

    def __init__(self, specs: Iterable[ComponentSpec] = ()) -> None:
        """Initialize a registry from a collection of specs."""

        self._specs: dict[str, ComponentSpec] = {}
        for spec in specs:
            self.register(spec)

    def register(self, spec: ComponentSpec) -> None:
        """Add a kind to the registry.

        Raises:
            ValueError: When the kind is already registered.
        """

        if spec.kind in self._specs:
            raise ValueError(f"Duplicate ComponentSpec kind: {spec.kind!r}")
        self._specs[spec.kind] = spec

    def get(self, kind: str) -> ComponentSpec | None:
        """Return the spec for a kind, or None when it is not registered."""

        return self._specs.get(kind)

    def kinds(self) -> tuple[str, ...]:
        """Return registered kinds in registration order."""

        return tuple(self._specs)

    def list(self) -> tuple[ComponentSpec, ...]:
        """Return all specs in registration order."""

        return tuple(self._specs.values())

    def __contains__(self, kind: object) -> bool:
        return kind in self._specs

    def __len__(self) -> int:
        return len(self._specs)


def _choices(alias: object) -> tuple[str, ...]:
    return tuple(get_args(alias))


VARIANT = enum(*_choices(Variant))
SIZE = enum(*_choices(Size))

_TREND = ObjectOf(
    fields=(
        PropField("value", NUMBER),
        PropField("isPositive", BOOLEAN),
    ),
    target=Trend,
)

_KPI_FIELDS: Final[tuple[PropField, ...]] = (
    PropField("title", STRING, description="Metric caption"),
    PropField("value", NUMBER, description="Numeric value"),
    optional("format", enum("currency", "number"), "currency"),
    optional("variant", VARIANT, "default"),
    optional("subtitle", STRING, description="Secondary line, e.g. '3 invoices'"),
    optional("icon", enum(*_choices(Icon)), "dollar-sign"),
    optional("trend", _TREND, description="{value, isPositive} change versus last period"),
)

_SERIES = ObjectOf(
    fields=(
        PropField("dataKey", STRING),
        PropField("label", STRING),
        optional("color", enum(*_choices(ChartColor)), "primary"),
    ),
    target=ChartSeries,
)

_COLUMN = ObjectOf(
    fields=(
        PropField("key", STRING),
        PropField("label", STRING),
        optional("format", enum(*_choices(ColumnFormat)), "text"),
    ),
    target=TableColumn,
)

_CONFIRM = ObjectOf(
    fields=(PropField("title", STRING), PropField("description", STRING)),
    target=ConfirmPrompt,
)

_QUICK_ACTION = ObjectOf(
    fields=(
        PropField("id", STRING),
        PropField("label", STRING),
        optional("icon", STRING),
        optional("href", STRING),
    ),
    target=QuickAction,
)


def _kpi_spec(kind: str, summary: str) -> ComponentSpec:
    return ComponentSpec(
        kind=kind,
        props_type=KpiCardProps,
        fields=_KPI_FIELDS,
        renderer=widgets.render_kpi_card,
        summary=summary,
    )


def build_default_specs() -> tuple[ComponentSpec, ...]:
    """Return the built-in catalog in documentation order."""

    return (
        _kpi_spec("kpi-card", "Display a key metric with optional trend indicator"),
        _kpi_spec("metric-card", "Display a single named metric value (same props as kpi-card)"),
        ComponentSpec(
            kind="stat-card",
            props_type=StatCardProps,
            fields=(
                PropField("label", STRING),
                PropField("value", STRING),
                optional("description", STRING),
                optional("variant", VARIANT, "default"),
            ),
            renderer=widgets.render_stat_card,
            summary="Simple statistic display",
        ),
        ComponentSpec(
            kind="alert-item",
            props_type=AlertItemProps,
            fields=(
                PropField("type", enum(*_choices(AlertType))),
                PropField("count", NUMBER),
                optional("total", NUMBER, description="Dollar total for the alert"),
                optional("severity", enum(*_choices(Severity)), "info"),
            ),
            renderer=widgets.render_alert_item,
            summary="Display an alert with count and optional dollar total",
        ),
        ComponentSpec(
            kind="data-table",
            props_type=DataTableProps,
            fields=(
                PropField("columns", ListOf(_COLUMN)),
                PropField("rows", ListOf(RECORD)),
                optional("title", STRING),
                optional("emptyMessage", STRING, "No data available"),
            ),
            renderer=widgets.render_data_table,
            summary="Tabular data display",
        ),
        ComponentSpec(
            kind="line-chart",
            props_type=LineChartProps,
            fields=(
                PropField("title", STRING),
                PropField("data", ListOf(RECORD)),
                PropField("xKey", STRING),
                PropField("lines", ListOf(_SERIES)),
                optional("description", STRING),
                optional("yAxisFormat", enum(*_choices(ValueFormat)), "currency"),
            ),
            renderer=widgets.render_line_chart,
            summary="Time series line chart",
        ),
        ComponentSpec(
            kind="bar-chart",
            props_type=BarChartProps,
            fields=(
                PropField("title", STRING),
                PropField("data", ListOf(RECORD)),
                PropField("xKey", STRING),
                PropField("bars", ListOf(_SERIES)),
                optional("description", STRING),
                optional("layout", enum("vertical", "horizontal"), "vertical"),
            ),
            renderer=widgets.render_bar_chart,
            summary="Bar chart for comparisons",
        ),
        ComponentSpec(
            kind="progress-card",
            props_type=ProgressCardProps,
            fields=(
                PropField("title", STRING),
                PropField("current", NUMBER),
                PropField("target", NUMBER),
                optional("format", enum(*_choices(ValueFormat)), "currency"),
                optional("variant", VARIANT, "default"),
            ),
            renderer=widgets.render_progress_card,
            summary="Progress toward a goal",
        ),
        ComponentSpec(
            kind="text-block",
            props_type=TextBlockProps,
            fields=(
                PropField("content", STRING),
                optional("variant", enum(*_choices(TextVariant)), "body"),
            ),
            renderer=widgets.render_text_block,
            summary="Text content",
        ),
        ComponentSpec(
            kind="action-button",
            props_type=ActionButtonProps,
            fields=(
                PropField("label", STRING),
                PropField("action", STRING, description="Action identifier, e.g. 'refresh'"),
                optional("variant", enum(*_choices(ButtonVariant)), "default"),
                optional("size", SIZE, "md"),
                optional("confirm", _CONFIRM, description="{title, description} confirmation prompt"),
            ),
            renderer=widgets.render_action_button,
            summary="Button that triggers an action",
        ),
        ComponentSpec(
            kind="quick-actions",
            props_type=QuickActionsProps,
            fields=(PropField("actions", ListOf(_QUICK_ACTION)),),
            renderer=widgets.render_quick_actions,
            summary="Grid of quick action buttons",
        ),
        ComponentSpec(
            kind="grid",
            props_type=GridProps,
            fields=(
                optional("columns", ScalarShape(label="an integer 1-4", types=(int, float), integer=True, minimum=1, maximum=4), 2),
                optional("gap", SIZE, "md"),
            ),
            renderer=widgets.render_grid,
            container=True,
            children_required=True,
            summary="Grid layout container",
        ),
        ComponentSpec(
            kind="stack",
            props_type=StackProps,
            fields=(
                optional("direction", enum(*_choices(StackDirection)), "vertical"),
                optional("gap", SIZE, "md"),
                optional("align", enum(*_choices(StackAlign)), "stretch"),
            ),
            renderer=widgets.render_stack,
            container=True,
            children_required=True,
            summary="Stack layout container",
        ),
        ComponentSpec(
            kind="card",
            props_type=CardProps,
            fields=(
                optional("title", STRING),
                optional("description", STRING),
                optional("padding", SIZE, "md"),
            ),
            renderer=widgets.render_card,
            container=True,
            summary="Card container with optional header",
        ),
        ComponentSpec(
            kind="conditional",
            props_type=ConditionalProps,
            fields=(
                PropField("condition", STRING, description="Dot-separated path into the data bag"),
                optional("operator", enum(*OPERATORS), "exists"),
                optional("value", ANY),
            ),
            renderer=widgets.render_conditional,
            container=True,
            children_required=True,
            accepts_fallback=True,
            summary="Conditionally render children based on data",
        ),
    )


DEFAULT_REGISTRY: Final[ComponentRegistry] = ComponentRegistry(build_default_specs())


def catalog_description(registry: ComponentRegistry | None = None) -> str:
    """Describe the catalog in prose for a text-generating model.

    Args:
        registry: Registry to describe; the default catalog when None.

    Returns:
        One paragraph per kind listing its props, required ones first.
    """

    registry = registry if registry is not None else DEFAULT_REGISTRY
    blocks: list[str] = []
    for spec in registry.list():
        lines = [f"### {spec.kind}", spec.summary]
        for prop in spec.fields:
            flag = "required" if prop.required else "optional"
            line = f"- {prop.name} ({flag}): {prop.shape.label}"
            if not prop.required and prop.default is not None:
                line += f", default {prop.default!r}"
            if prop.description:
                line += f". {prop.description}"
            lines.append(line)
        if spec.container:
            lines.append(
                "- children (required): list of components"
                if spec.children_required
                else "- children (optional): list of components"
            )
        if spec.accepts_fallback:
            lines.append("- fallback (optional): components rendered when the condition is false")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)
