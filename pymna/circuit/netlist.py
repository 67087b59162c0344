"""Netlist and model records for circuit topology (immutable/functional style)."""

from __future__ import annotations
from typing import NamedTuple

from .devices import Device
from .analyses import AnalysisDirective


class MosModel(NamedTuple):
    """A .model card for a MOSFET (parameter overrides on built-in defaults)."""
    name: str
    polarity: str = "nmos"  # "nmos" or "pmos"
    params: tuple[tuple[str, float], ...] = ()  # e.g. (("vth0", 0.5), ("kp", 2e-4))

    @property
    def is_pmos(self) -> bool:
        return self.polarity.lower() in ("pmos", "pfet", "p")

    def param(self, name: str) -> float | None:
        for key, value in self.params:
            if key.lower() == name:
                return value
        return None


class Netlist(NamedTuple):
    """
    Immutable structured netlist.

    Build using functional style:
        net = Netlist("divider")
        net, v1 = V(net, "in", "0", name="V1", dc=1.8)
        net, r1 = R(net, "in", "out", name="R1", value=1e3)

    node_names keeps every node in first-seen order (ground included);
    matrix indices are assigned from it.
    """
    title: str = ""
    devices: tuple[Device, ...] = ()
    models: tuple[MosModel, ...] = ()
    analyses: tuple[AnalysisDirective, ...] = ()
    node_names: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.devices

    def add_device(self, device: Device) -> Netlist:
        """
        Add a device, registering any new terminal names.

        Returns the new netlist.
        """
        names = self.node_names
        for node in device.terminals:
            if node not in names:
                names = names + (node,)
        return self._replace(devices=self.devices + (device,), node_names=names)

    def add_model(self, model: MosModel) -> Netlist:
        return self._replace(models=self.models + (model,))

    def add_analysis(self, analysis: AnalysisDirective) -> Netlist:
        return self._replace(analyses=self.analyses + (analysis,))

    def find_device(self, name: str, kinds: tuple[str, ...] | None = None) -> int:
        """
        Index of the device named ``name`` (case-insensitive), or -1.

        Args:
            name: Device name
            kinds: Only match devices whose kind is in this tuple
        """
        wanted = name.lower()
        for i, device in enumerate(self.devices):
            if device.name.lower() == wanted and (kinds is None or device.kind in kinds):
                return i
        return -1

    def find_model(self, name: str) -> MosModel | None:
        """Model matched case-insensitively by name, or None."""
        wanted = name.lower()
        for model in self.models:
            if model.name.lower() == wanted:
                return model
        return None

    def replace_device(self, index: int, device: Device) -> Netlist:
        """Copy of this netlist with the device at ``index`` swapped out."""
        devices = self.devices[:index] + (device,) + self.devices[index + 1:]
        return self._replace(devices=devices)
