"""The compile options offered to a host compiler, in negotiation order."""

from __future__ import annotations

import locale
from collections.abc import Callable
from dataclasses import dataclass

from ..options import CompileOptions
from .base import HostCompiler

# Returns whether the host accepted the option, or None when it does not apply.
Setter = Callable[[HostCompiler, CompileOptions], "bool | None"]


@dataclass(slots=True, frozen=True)
class HostParameter:
    """One negotiable option: its name and how it is handed to the host."""

    name: str
    setter: Setter


def forward(
    name: str,
    *arguments: str,
    method: str | None = None,
    optional: bool = False,
    when: Callable[[HostCompiler], bool] | None = None,
) -> HostParameter:
    """Build a parameter that calls ``host.set_<name>`` with option values.

    ``arguments`` names the option attributes passed to the setter and
    defaults to ``name`` alone. A host lacking the setter accepts the option
    only while it is unset, unless ``optional`` marks the setter as a
    light-up extension that is skipped when absent. ``when`` restricts the
    parameter to hosts matching a predicate.
    """
    method_name = method or f"set_{name}"
    argument_names = arguments or (name,)

    def setter(host: HostCompiler, options: CompileOptions) -> bool | None:
        if when is not None and not when(host):
            return None
        bound = getattr(host, method_name, None)
        if bound is None:
            if optional:
                return None
            return options.is_default(name)
        return bool(bound(*(_argument(options, item) for item in argument_names)))

    return HostParameter(name=name, setter=setter)


def never_supported(name: str) -> HostParameter:
    """Options no host compiler can take; setting one forces the external tool."""

    def setter(_host: HostCompiler, options: CompileOptions) -> bool | None:
        if options.is_default(name) or not options.value(name):
            return None
        return False

    return HostParameter(name=name, setter=setter)


def preferred_ui_lang(ui_culture: str | None = None) -> HostParameter:
    """The host always reports in its own process culture.

    The option is therefore supported only when unset or already equal to
    the current UI culture.
    """

    def setter(_host: HostCompiler, options: CompileOptions) -> bool | None:
        requested = options.preferred_ui_lang
        if not requested:
            return None
        current = ui_culture if ui_culture is not None else current_ui_culture()
        return requested.lower() == (current or "").lower()

    return HostParameter(name="preferred_ui_lang", setter=setter)


def current_ui_culture() -> str:
    """Return the process UI culture as a tag such as ``en-US``."""
    language, _encoding = locale.getlocale()
    if not language or language in {"C", "POSIX"}:
        return ""
    return language.replace("_", "-")


def _argument(options: CompileOptions, name: str) -> object:
    # Derived values such as base_address_hex are properties, not fields.
    if isinstance(getattr(type(options), name, None), property):
        return getattr(options, name)
    return options.value(name)


def _has_platform_preference(host: HostCompiler) -> bool:
    return hasattr(host, "set_platform_with_32bit_preference")


def _lacks_platform_preference(host: HostCompiler) -> bool:
    return not _has_platform_preference(host)


def build_host_parameters(ui_culture: str | None = None) -> tuple[HostParameter, ...]:
    # disabled_warnings must follow warnings_[not_]as_errors; it overrides both.
    return (
        forward("additional_lib_paths"),
        forward("add_modules"),
        forward("analyzers", optional=True),
        forward("code_analysis_rule_set", optional=True),
        forward("additional_files", optional=True),
        forward("base_address", "target_type", "base_address_hex"),
        forward("code_page"),
        forward("debug_type", "emit_debug_information", "debug_type"),
        forward("define_constants"),
        forward("delay_sign"),
        forward("documentation_file"),
        forward("file_alignment"),
        forward("generate_documentation"),
        forward("imports"),
        forward("key_container"),
        forward("key_file"),
        forward("link_resources"),
        forward("main_entry_point"),
        forward("no_config"),
        forward("no_standard_lib"),
        forward("no_warnings"),
        forward("optimize"),
        forward("option_compare"),
        forward("option_explicit"),
        forward("option_strict"),
        forward("option_strict_type"),
        forward("output_assembly"),
        forward(
            "platform",
            "platform_with_32bit_preference",
            method="set_platform_with_32bit_preference",
            when=_has_platform_preference,
        ),
        forward("high_entropy_va", when=_has_platform_preference),
        forward("subsystem_version", when=_has_platform_preference),
        forward("platform", when=_lacks_platform_preference),
        forward("references"),
        forward("remove_integer_checks"),
        forward("resources"),
        forward("response_files"),
        forward("root_namespace"),
        forward("sdk_path"),
        forward("sources"),
        forward("target_compact_framework"),
        forward("target_type"),
        forward("treat_warnings_as_errors"),
        forward("warnings_as_errors"),
        forward("warnings_not_as_errors"),
        forward("disabled_warnings"),
        forward("win32_icon"),
        forward("win32_resource"),
        forward("module_assembly_name"),
        forward("option_infer"),
        forward("win32_manifest", "win32_manifest_switch"),
        forward("lang_version"),
        forward("vb_runtime", optional=True),
        never_supported("no_vb_runtime_reference"),
        preferred_ui_lang(ui_culture),
    )
