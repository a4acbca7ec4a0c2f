"""Compile option bag shared by the host negotiation and the command line."""

from __future__ import annotations

from dataclasses import dataclass, fields

from .errors import InvalidParameterError, format_message

VALID_VERBOSITY = ("quiet", "normal", "verbose")

# Boolean options whose effective value is true when left unset.
_TRUE_BY_DEFAULT = frozenset({"option_explicit"})


@dataclass(slots=True, frozen=True)
class Reference:
    """A referenced assembly and whether its interop types are embedded."""

    path: str
    embed_interop_types: bool = False

    @classmethod
    def coerce(cls, value: object) -> Reference:
        if isinstance(value, Reference):
            return value
        if isinstance(value, str):
            return cls(path=value)
        if isinstance(value, dict) and isinstance(value.get("path"), str):
            return cls(
                path=value["path"],
                embed_interop_types=bool(value.get("embed_interop_types", False)),
            )
        raise InvalidParameterError("references", value)


@dataclass(slots=True)
class CompileOptions:
    """Every option a compile request may carry; ``None`` means not set."""

    sources: list[str] | None = None
    references: list[Reference] | None = None
    output_assembly: str | None = None
    target_type: str | None = None
    additional_lib_paths: list[str] | None = None
    add_modules: list[str] | None = None
    analyzers: list[str] | None = None
    additional_files: list[str] | None = None
    code_analysis_rule_set: str | None = None
    base_address: str | None = None
    code_page: int | None = None
    debug_type: str | None = None
    emit_debug_information: bool | None = None
    define_constants: str | None = None
    delay_sign: bool | None = None
    disabled_warnings: str | None = None
    documentation_file: str | None = None
    error_report: str | None = None
    file_alignment: int | None = None
    generate_documentation: bool | None = None
    high_entropy_va: bool | None = None
    imports: list[str] | None = None
    key_container: str | None = None
    key_file: str | None = None
    lang_version: str | None = None
    link_resources: list[str] | None = None
    main_entry_point: str | None = None
    module_assembly_name: str | None = None
    no_config: bool | None = None
    no_standard_lib: bool | None = None
    no_vb_runtime_reference: bool | None = None
    no_warnings: bool | None = None
    no_win32_manifest: bool | None = None
    optimize: bool | None = None
    option_compare: str | None = None
    option_explicit: bool | None = None
    option_infer: bool | None = None
    option_strict: bool | None = None
    option_strict_type: str | None = None
    pdb_file: str | None = None
    platform: str | None = None
    prefer_32bit: bool | None = None
    preferred_ui_lang: str | None = None
    remove_integer_checks: bool | None = None
    resources: list[str] | None = None
    response_files: list[str] | None = None
    root_namespace: str | None = None
    sdk_path: str | None = None
    subsystem_version: str | None = None
    target_compact_framework: bool | None = None
    treat_warnings_as_errors: bool | None = None
    vb_runtime: str | None = None
    vb_runtime_path: str | None = None
    verbosity: str | None = None
    vs_session_guid: str | None = None
    warnings_as_errors: str | None = None
    warnings_not_as_errors: str | None = None
    win32_icon: str | None = None
    win32_manifest: str | None = None
    win32_resource: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> CompileOptions:
        known = {item.name for item in fields(cls)}
        unknown = sorted(key for key in data if key not in known)
        if unknown:
            raise InvalidParameterError(unknown[0], data[unknown[0]], "Unknown option.")
        values = dict(data)
        references = values.get("references")
        if references is not None:
            if not isinstance(references, list):
                raise InvalidParameterError("references", references)
            values["references"] = [Reference.coerce(item) for item in references]
        return cls(**values)  # type: ignore[arg-type]

    def value(self, name: str) -> object:
        """Return the effective value of an option, applying boolean defaults."""
        raw = getattr(self, name)
        if raw is None and _is_boolean_field(name):
            return name in _TRUE_BY_DEFAULT
        return raw

    def is_default(self, name: str) -> bool:
        """Return true when an option was never set by the caller."""
        raw = getattr(self, name)
        if raw is None:
            return True
        return isinstance(raw, (str, list, tuple)) and not raw

    def validate(self) -> None:
        if self.verbosity is not None and self.verbosity.lower() not in VALID_VERBOSITY:
            raise InvalidParameterError(
                "verbosity", self.verbosity, "Valid values are: Quiet, Normal, Verbose."
            )
        if self.sources and not self.output_assembly:
            raise InvalidParameterError(
                "output_assembly", None, format_message("missing_output_assembly")
            )
        # Raises for malformed addresses.
        _ = self.base_address_hex

    @property
    def base_address_hex(self) -> str | None:
        """Base address in bare hexadecimal, the only form the compiler takes.

        Accepts ``0x10000000``, ``&H10000000`` or a decimal value.
        """
        raw = self.base_address
        if raw is None:
            return None
        if len(raw) > 2 and raw[:2].lower() in ("0x", "&h"):
            return raw[2:]
        try:
            value = int(raw.strip(), 10)
        except ValueError as exc:
            raise InvalidParameterError("base_address", raw) from exc
        if not 0 <= value <= 0xFFFFFFFF:
            raise InvalidParameterError("base_address", raw)
        return format(value, "X")

    @property
    def define_constants_switch(self) -> str | None:
        """Define constants quoted as one argument, embedded quotes escaped."""
        if not self.define_constants:
            return None
        escaped = self.define_constants.replace('\\"', '\\\\"').replace('"', '\\"')
        return f'"{escaped}"'

    @property
    def platform_with_32bit_preference(self) -> str | None:
        if self.platform is None:
            return None
        if self.prefer_32bit and self.platform.lower() == "anycpu":
            return "anycpu32bitpreferred"
        return self.platform

    @property
    def win32_manifest_switch(self) -> str | None:
        if self.no_win32_manifest:
            return None
        return self.win32_manifest


def _is_boolean_field(name: str) -> bool:
    for item in fields(CompileOptions):
        if item.name == name:
            return item.type == "bool | None"
    return False
