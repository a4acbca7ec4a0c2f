"""Serialize compile options into compiler command-line switches."""

from __future__ import annotations

import re
from collections.abc import Iterable

from .options import CompileOptions, Reference

_LIST_SEPARATORS = re.compile(r"[;,]")


class CommandLineBuilder:
    """Accumulates switches in order; absent values add nothing."""

    def __init__(self) -> None:
        self.arguments: list[str] = []

    def append_switch(self, switch: str) -> None:
        self.arguments.append(switch)

    def append_switch_if_not_none(self, switch: str, value: object) -> None:
        if value is None:
            return
        self.arguments.append(f"{switch}{value}")

    def append_list(self, switch: str, values: Iterable[object] | None, separator: str = ",") -> None:
        if not values:
            return
        self.arguments.append(f"{switch}{separator.join(str(item) for item in values)}")

    def append_split(self, switch: str, value: str | None) -> None:
        """Append a ``;``/``,`` separated list, normalized to commas."""
        if not value:
            return
        items = [item.strip() for item in _LIST_SEPARATORS.split(value) if item.strip()]
        if items:
            self.arguments.append(f"{switch}{','.join(items)}")

    def append_plus_or_minus(self, switch: str, value: bool | None) -> None:
        if value is None:
            return
        self.arguments.append(f"{switch}{'+' if value else '-'}")

    def append_when_true(self, switch: str, value: bool | None) -> None:
        if value:
            self.arguments.append(switch)


def build_command_line(options: CompileOptions, *, design_time: bool = False) -> list[str]:
    """Return the switches for ``options``; order matters where switches overlap."""
    builder = CommandLineBuilder()
    builder.append_switch_if_not_none("/baseaddress:", options.base_address_hex)
    builder.append_list("/libpath:", options.additional_lib_paths)
    builder.append_list("/imports:", options.imports)
    # /doc+ must come before /doc:<file> so an explicit file wins.
    builder.append_plus_or_minus("/doc", options.generate_documentation)
    builder.append_switch_if_not_none("/optioncompare:", options.option_compare)
    builder.append_plus_or_minus("/optionexplicit", options.option_explicit)
    builder.append_switch("/optionstrict+" if options.option_strict else "/optionstrict:custom")
    builder.append_switch_if_not_none("/optionstrict:", options.option_strict_type)
    builder.append_when_true("/nowarn", options.no_warnings)
    builder.append_split("/nowarn:", options.disabled_warnings)
    builder.append_plus_or_minus("/optioninfer", options.option_infer)
    builder.append_when_true("/nostdlib", options.no_standard_lib)
    builder.append_when_true("/novbruntimeref", options.no_vb_runtime_reference)
    builder.append_switch_if_not_none("/errorreport:", options.error_report)
    builder.append_switch_if_not_none("/platform:", options.platform_with_32bit_preference)
    builder.append_plus_or_minus("/removeintchecks", options.remove_integer_checks)
    builder.append_switch_if_not_none("/rootnamespace:", options.root_namespace)
    builder.append_switch_if_not_none("/sdkpath:", options.sdk_path)
    builder.append_switch_if_not_none("/langversion:", options.lang_version)
    builder.append_switch_if_not_none("/moduleassemblyname:", options.module_assembly_name)
    builder.append_when_true("/netcf", options.target_compact_framework)
    builder.append_switch_if_not_none("/preferreduilang:", options.preferred_ui_lang)
    builder.append_plus_or_minus("/highentropyva", options.high_entropy_va)
    _append_vb_runtime(builder, options)

    if options.verbosity is not None and options.verbosity.lower() in ("quiet", "verbose"):
        builder.append_switch(f"/{options.verbosity}")

    builder.append_switch_if_not_none("/doc:", options.documentation_file)
    builder.append_switch_if_not_none("/define:", options.define_constants_switch)
    _append_references(builder, options.references)
    builder.append_switch_if_not_none("/win32resource:", options.win32_resource)
    if options.main_entry_point is not None and options.main_entry_point.lower() != "sub main":
        builder.append_switch(f"/main:{options.main_entry_point}")

    _append_common_switches(builder, options)

    # Specific warnings must follow the blanket /warnaserror[+|-] switch.
    builder.append_split("/warnaserror+:", options.warnings_as_errors)
    builder.append_split("/warnaserror-:", options.warnings_not_as_errors)

    if not design_time and options.vs_session_guid and options.vs_session_guid.strip():
        builder.append_switch(f"/sqmsessionguid:{options.vs_session_guid}")

    # Response files go last so their contents apply predictably.
    for response_file in options.response_files or ():
        builder.append_switch(f"@{response_file}")

    builder.arguments.extend(options.sources or ())
    return builder.arguments


def _append_vb_runtime(builder: CommandLineBuilder, options: CompileOptions) -> None:
    runtime = options.vb_runtime
    path = options.vb_runtime_path
    if (path or "").lower() == (runtime or "").lower():
        builder.append_switch_if_not_none("/vbruntime:", path)
        return
    if runtime is None:
        return
    forms = {"embed": "/vbruntime*", "none": "/vbruntime-", "default": "/vbruntime+"}
    switch = forms.get(runtime.lower())
    if switch is not None:
        builder.append_switch(switch)
    else:
        builder.append_switch(f"/vbruntime:{runtime}")


def _append_references(builder: CommandLineBuilder, references: list[Reference] | None) -> None:
    if not references:
        return
    links = [item.path for item in references if item.embed_interop_types]
    plain = [item.path for item in references if not item.embed_interop_types]
    builder.append_list("/link:", links)
    builder.append_list("/reference:", plain)


def _append_common_switches(builder: CommandLineBuilder, options: CompileOptions) -> None:
    builder.append_list("/addmodule:", options.add_modules)
    builder.append_switch_if_not_none("/codepage:", options.code_page)
    builder.append_plus_or_minus("/debug", options.emit_debug_information)
    builder.append_switch_if_not_none("/debug:", options.debug_type)
    builder.append_plus_or_minus("/delaysign", options.delay_sign)
    builder.append_switch_if_not_none("/filealign:", options.file_alignment)
    builder.append_switch_if_not_none("/keycontainer:", options.key_container)
    builder.append_switch_if_not_none("/keyfile:", options.key_file)
    for resource in options.link_resources or ():
        builder.append_switch(f"/linkresource:{resource}")
    builder.append_when_true("/noconfig", options.no_config)
    builder.append_when_true("/nowin32manifest", options.no_win32_manifest)
    builder.append_plus_or_minus("/optimize", options.optimize)
    builder.append_switch_if_not_none("/out:", options.output_assembly)
    builder.append_switch_if_not_none("/ruleset:", options.code_analysis_rule_set)
    builder.append_switch_if_not_none("/subsystemversion:", options.subsystem_version)
    for resource in options.resources or ():
        builder.append_switch(f"/resource:{resource}")
    builder.append_switch_if_not_none("/target:", options.target_type)
    builder.append_plus_or_minus("/warnaserror", options.treat_warnings_as_errors)
    builder.append_switch_if_not_none("/win32icon:", options.win32_icon)
    builder.append_switch_if_not_none("/win32manifest:", options.win32_manifest_switch)
    for analyzer in options.analyzers or ():
        builder.append_switch(f"/analyzer:{analyzer}")
    for additional_file in options.additional_files or ():
        builder.append_switch(f"/additionalfile:{additional_file}")
