from __future__ import annotations
from typing import Callable, Union
from PyQt6.QtWidgets import (
    QWidget, QHBoxLayout, QGroupBox, QLabel, QGridLayout, QVBoxLayout,
)
from PyQt6.QtCore import Qt
from midi.params import AmpChannel, Domain, ParamDef, ParamMap
from ui.widgets import ParamCombo, ParamKnob, ParamSelector, ParamToggle

_TONE_KEYS = ("gain", "bass", "middle", "treble", "presence", "volume")
_REVERB_KNOB_KEYS = ("reverb_decay", "reverb_predelay", "reverb_tone", "reverb_mix")

ParamWidget = Union[ParamCombo, ParamKnob, ParamSelector, ParamToggle]


def create_param_widget(
    param: ParamDef,
    on_change: Callable[[int, object], None],
    on_release: Callable[[int], None] | None = None,
) -> ParamWidget:
    if param.domain is Domain.CONTINUOUS:
        knob = ParamKnob(param, on_change)
        if on_release is not None:
            knob.released.connect(on_release)
        return knob
    if param.domain is Domain.BOOLEAN:
        return ParamToggle(param, on_change)
    if param.domain is Domain.QUAD:
        return ParamSelector(param, on_change)
    return ParamCombo(param, on_change)


class _ParamPanel(QWidget):
    def __init__(
        self,
        param_map: ParamMap,
        on_user_change: Callable[[int, object], None] | None = None,
        on_knob_release: Callable[[int], None] | None = None,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._param_map = param_map
        self._on_user_change = on_user_change or (lambda i, v: None)
        self._on_knob_release = on_knob_release
        self._widgets: dict[int, ParamWidget] = {}

    def _add(self, param: ParamDef) -> ParamWidget:
        widget = create_param_widget(param, self._on_user_change, self._on_knob_release)
        self._widgets[param.id] = widget
        return widget

    def _knob_column(self, param: ParamDef) -> QWidget:
        column = QWidget()
        layout = QVBoxLayout(column)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(2)
        layout.addWidget(self._add(param), alignment=Qt.AlignmentFlag.AlignHCenter)
        label = QLabel(param.display_name)
        label.setAlignment(Qt.AlignmentFlag.AlignHCenter)
        layout.addWidget(label)
        return column

    def widget(self, param_id: int) -> ParamWidget | None:
        return self._widgets.get(param_id)

    def param_ids(self) -> list[int]:
        return list(self._widgets)

    def on_param_changed(self, param_id: int, value) -> None:
        """Update a widget from the amp; never calls back into the write path."""
        widget = self._widgets.get(param_id)
        if widget is not None:
            widget.set_value(value)


class ChannelPanel(_ParamPanel):
    """Preamp, reverb and power-amp controls for one amp channel (A or B)."""

    def __init__(
        self,
        channel: AmpChannel,
        param_map: ParamMap,
        on_user_change: Callable[[int, object], None] | None = None,
        on_knob_release: Callable[[int], None] | None = None,
        on_amp_selected: Callable[[AmpChannel, int], None] | None = None,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(param_map, on_user_change, on_knob_release, parent)
        self.channel = channel
        self._sfx = channel.value.lower()
        self._on_amp_selected = on_amp_selected
        self._build_ui()

    def _param(self, key: str) -> ParamDef:
        return self._param_map.get(f"{key}_{self._sfx}")

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self._build_preamp_group())
        layout.addWidget(self._build_reverb_group())
        layout.addWidget(self._build_power_amp_group())
        layout.addStretch()

    def _build_preamp_group(self) -> QGroupBox:
        group = QGroupBox(f"Channel {self.channel.value}")
        layout = QGridLayout(group)

        amp = self._param("amp")
        layout.addWidget(QLabel("Amp:"), 0, 0)
        if self._on_amp_selected is not None:
            # Amp selection goes through the defaults-aware write instead
            combo = create_param_widget(amp, self._amp_selected)
            self._widgets[amp.id] = combo
        else:
            combo = self._add(amp)
        layout.addWidget(combo, 0, 1, 1, 3)

        layout.addWidget(QLabel("Cab:"), 1, 0)
        layout.addWidget(self._add(self._param("cab")), 1, 1, 1, 3)

        layout.addWidget(QLabel("Voicing:"), 2, 0)
        layout.addWidget(self._add(self._param("voice")), 2, 1, 1, 3)

        knobs = QHBoxLayout()
        for key in _TONE_KEYS:
            knobs.addWidget(self._knob_column(self._param(key)))
        layout.addLayout(knobs, 3, 0, 1, 4)
        return group

    def _build_reverb_group(self) -> QGroupBox:
        group = QGroupBox("Reverb")
        layout = QGridLayout(group)
        layout.addWidget(self._add(self._param("reverb_bypass")), 0, 0)
        layout.addWidget(self._add(self._param("reverb_type")), 0, 1, 1, 3)

        knobs = QHBoxLayout()
        for key in _REVERB_KNOB_KEYS:
            knobs.addWidget(self._knob_column(self._param(key)))
        layout.addLayout(knobs, 1, 0, 1, 4)
        return group

    def _build_power_amp_group(self) -> QGroupBox:
        group = QGroupBox("Power Amp")
        layout = QGridLayout(group)
        for row, param in enumerate(self._param_map.power_amp(self.channel)):
            layout.addWidget(QLabel(f"{param.display_name}:"), row, 0)
            layout.addWidget(self._add(param), row, 1)
        return group

    def _amp_selected(self, param_id: int, index: int) -> None:
        self._on_amp_selected(self.channel, index)


class MasterPanel(_ParamPanel):
    """Settings shared by both channels."""

    def __init__(
        self,
        param_map: ParamMap,
        on_user_change: Callable[[int, object], None] | None = None,
        on_knob_release: Callable[[int], None] | None = None,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(param_map, on_user_change, on_knob_release, parent)
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        group = QGroupBox("Master")
        grid = QGridLayout(group)

        grid.addWidget(QLabel("Channel:"), 0, 0)
        grid.addWidget(self._add(self._param_map.get("channel_b")), 0, 1)
        grid.addWidget(QLabel("Low Volume:"), 1, 0)
        grid.addWidget(self._add(self._param_map.get("low_volume")), 1, 1)
        grid.addWidget(QLabel("XLR Mic:"), 2, 0)
        grid.addWidget(self._add(self._param_map.get("xlr_mic")), 2, 1)
        grid.addWidget(self._knob_column(self._param_map.get("master_volume")), 0, 2, 3, 1)

        layout.addWidget(group)
        layout.addStretch()
