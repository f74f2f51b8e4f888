# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Rendering of instructions into ``instructions/<name>.py`` modules.

An instruction module holds the arguments dataclass, the accounts dataclass,
the codec of the instruction data and a builder returning a solders
``Instruction``.  Accounts fall into one of these groups:

* required accounts the caller passes in;
* accounts with a well-known address, defaulted to it;
* derivable accounts, which the builder derives from their seeds when the
  caller leaves them unset;
* optional accounts, replaced by the program id when unset.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from idlkit.codegen import pda
from idlkit.codegen.context import RenderContext
from idlkit.codegen.discriminator import instruction_discriminator
from idlkit.codegen.emit import INDENT, ImportSet, render_index, render_module
from idlkit.codegen.errors import SeedResolutionError
from idlkit.codegen.naming import constant_name, pascal_case, python_name, snake_case
from idlkit.codegen.registry import INSTRUCTIONS_PACKAGE, TypeRegistry
from idlkit.codegen.render_type import RenderedModule
from idlkit.codegen.structs import StructCodecDecl, emit_dataclass, emit_struct_codec, render_struct_codec
from idlkit.codegen.type_mapper import TypeMapper
from idlkit.model.entities import Instruction, InstructionAccount

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

REMAINING_ACCOUNTS_FIELD = "remaining_accounts"


@dataclass(frozen=True)
class AccountPlan:
    """How the builder obtains one instruction account.

    Attributes:
        account: The account as declared.
        field_name: Attribute on the accounts dataclass.
        default: Module constant holding a default address, if any.
        derivation: Expression deriving the address when unset, if any.
    """

    account: InstructionAccount
    field_name: str
    default: str | None = None
    derivation: str | None = None

    @property
    def derived(self) -> bool:
        return self.derivation is not None

    @property
    def type_hint(self) -> str:
        if self.account.is_optional or self.derived:
            return "Pubkey | None"
        return "Pubkey"

    @property
    def address(self) -> str:
        """Return the builder expression holding the account's address."""
        if self.derived:
            return pda.derived_local(self.account)
        return f"accounts.{self.field_name}"


def plan_accounts(instruction: Instruction, context: RenderContext) -> tuple[list[AccountPlan], dict[str, str]]:
    """Decide how every account of *instruction* is obtained.

    Returns:
        The plans in declaration order, and the default address constants
        the module must define, keyed by constant name.
    """
    constants: dict[str, str] = {}
    defaults: dict[str, str] = {}
    eligible: list[InstructionAccount] = []
    for account in instruction.accounts:
        if account.is_optional:
            continue
        address = context.known_address(account.name)
        if address is None and account.pda is not None and pda.is_eligible(account, instruction):
            address = pda.constant_address(account.pda)
            if address is None:
                eligible.append(account)
        if address is not None:
            constant = f"_DEFAULT_{constant_name(account.name)}"
            constants[constant] = address
            defaults[account.name] = constant

    derivations: dict[str, str] = {}
    derived: set[str] = set()
    # Constant formulas first, so that other seeds may refer to their locals.
    for account in sorted(eligible, key=_derived_last):
        assert account.pda is not None
        try:
            derivations[account.name] = pda.render_pda(account.pda, instruction, derived)
        except SeedResolutionError as exc:
            logger.warning("%s.%s: address must be supplied by the caller: %s", instruction.name, account.name, exc)
            continue
        derived.add(account.name)

    plans = [
        AccountPlan(
            account=account,
            field_name=python_name(account.name),
            default=defaults.get(account.name),
            derivation=derivations.get(account.name),
        )
        for account in instruction.accounts
    ]
    return plans, constants


def render_instruction(
    instruction: Instruction, registry: TypeRegistry, context: RenderContext | None = None
) -> RenderedModule:
    """Render the module of one instruction.

    Raises:
        GenerationError: If an argument type cannot be mapped, or the
            instruction data would be empty.
    """
    context = context or RenderContext()
    mapper = TypeMapper(registry, context, owner=instruction.name)
    mapper.clear_usages()
    base = pascal_case(instruction.name)
    args_class = f"{base}InstructionArgs"
    accounts_class = f"{base}InstructionAccounts"
    discriminator = instruction_discriminator(instruction, context.dialect)
    decl = render_struct_codec(
        mapper,
        instruction.args,
        args_class,
        f"{snake_case(instruction.name)}_struct",
        discriminator=discriminator,
        require_fields=True,
    )
    plans, constants = plan_accounts(instruction, context)

    imports = ImportSet()
    imports.add("solders.instruction", "AccountMeta", "Instruction")
    imports.add("solders.pubkey", "Pubkey")
    imports.add_libraries(mapper.accumulator.libraries)
    imports.add_defined(mapper.accumulator.defined.values(), INSTRUCTIONS_PACKAGE)
    if context.program_address is not None:
        imports.add("..program_id", "PROGRAM_ID")
    if decl.data_fields:
        imports.add("dataclasses", "dataclass")
    if plans:
        imports.add("dataclasses", "dataclass", "field")

    builder = f"create_{snake_case(instruction.name)}_instruction"
    exports: list[str] = []
    blocks: list[str] = []
    if discriminator is not None:
        exports.append(discriminator.constant)
        blocks.append(f"{discriminator.constant} = {discriminator.literal}\n")
    if constants:
        blocks.append("".join(f'{name} = Pubkey.from_string("{address}")\n' for name, address in constants.items()))
    if decl.data_fields:
        exports.append(args_class)
        docs = [f"Arguments of the ``{instruction.name}`` instruction."]
        blocks.append(emit_dataclass(args_class, decl.data_fields, docs=docs))
    if plans:
        exports.append(accounts_class)
        blocks.append(_accounts_class(accounts_class, instruction, plans))
    exports.extend([decl.var_name, builder])
    blocks.append(emit_struct_codec(decl))
    blocks.append(_builder(builder, instruction, decl, plans, args_class, accounts_class, context))

    code = render_module(f"The ``{instruction.name}`` instruction and its builder.", imports, exports, blocks)
    return RenderedModule(instruction.name, snake_case(instruction.name), code, exports, decl.fixable, decl.byte_size)


def render_instruction_index(instructions: list[RenderedModule]) -> str:
    """Render ``instructions/__init__.py``."""
    return render_index([module.module for module in instructions])


# ################
# Implementation
# ################


def _derived_last(account: InstructionAccount) -> bool:
    return not (account.pda is not None and account.pda.is_constant)


def _flags(account: InstructionAccount) -> str:
    flags = []
    if account.is_mut:
        flags.append("writable")
    if account.is_signer:
        flags.append("signer")
    if account.is_optional:
        flags.append("optional")
    return f"[{', '.join(flags)}]" if flags else ""


def _accounts_class(class_name: str, instruction: Instruction, plans: list[AccountPlan]) -> str:
    docs = [f"Accounts of the ``{instruction.name}`` instruction.", "", "Attributes:"]
    for plan in plans:
        description = " ".join(line.strip() for line in plan.account.docs if line.strip())
        if plan.derived:
            description = f"{description} Derived from its seeds when unset.".strip()
        text = " ".join(part for part in (_flags(plan.account), description) if part)
        docs.append(f"{INDENT}{plan.field_name}: {text}".rstrip())
    lines = ["@dataclass(kw_only=True)", f"class {class_name}:", _docstring(docs).rstrip("\n"), ""]
    for plan in plans:
        if plan.default is not None:
            lines.append(f"{INDENT}{plan.field_name}: {plan.type_hint} = {plan.default}")
        elif plan.type_hint.endswith("| None"):
            lines.append(f"{INDENT}{plan.field_name}: {plan.type_hint} = None")
        else:
            lines.append(f"{INDENT}{plan.field_name}: {plan.type_hint}")
    lines.append(f"{INDENT}{REMAINING_ACCOUNTS_FIELD}: list[AccountMeta] = field(default_factory=list)")
    return "\n".join(lines) + "\n"


def _docstring(lines: list[str]) -> str:
    # render_docs drops blank lines and indentation, which Attributes sections need.
    escaped = [line.replace("\\", "\\\\").replace('"', "'") for line in lines]
    body = "".join(f"{INDENT}{line}\n" if line else "\n" for line in escaped[1:])
    return f'{INDENT}"""{escaped[0]}\n{body}{INDENT}"""\n'


def _account_meta(plan: AccountPlan) -> str:
    account = plan.account
    meta = f"AccountMeta(pubkey={plan.address}, is_signer={account.is_signer}, is_writable={account.is_mut})"
    if not account.is_optional:
        return f"{INDENT * 2}{meta},"
    return (
        f"{INDENT * 2}(\n"
        f"{INDENT * 3}{meta}\n"
        f"{INDENT * 3}if {plan.address} is not None\n"
        f"{INDENT * 3}else AccountMeta(pubkey=program_id, is_signer=False, is_writable=False)\n"
        f"{INDENT * 2}),"
    )


def _builder(
    name: str,
    instruction: Instruction,
    decl: StructCodecDecl,
    plans: list[AccountPlan],
    args_class: str,
    accounts_class: str,
    context: RenderContext,
) -> str:
    params = []
    if plans:
        params.append(f"accounts: {accounts_class}")
    if decl.data_fields:
        params.append(f"args: {args_class}")
    if context.program_address is not None:
        params.append("program_id: Pubkey = PROGRAM_ID")
    else:
        params.append("program_id: Pubkey")
    lines = [f"def {name}(", *(f"{INDENT}{param}," for param in params), ") -> Instruction:"]

    docs = [line.strip() for line in instruction.docs if line.strip()] or [
        f"Create the ``{instruction.name}`` instruction."
    ]
    docs.extend(["", "Args:"])
    if plans:
        docs.append(f"{INDENT}accounts: Accounts of the instruction.")
    if decl.data_fields:
        docs.append(f"{INDENT}args: Arguments of the instruction.")
    docs.append(f"{INDENT}program_id: Program the instruction is sent to.")
    lines.append(_docstring(docs).rstrip("\n"))

    for plan in sorted((plan for plan in plans if plan.derived), key=lambda plan: _derived_last(plan.account)):
        local = plan.address
        lines.append(f"{INDENT}{local} = accounts.{plan.field_name}")
        lines.append(f"{INDENT}if {local} is None:")
        lines.append(f"{INDENT * 2}{local} = {plan.derivation}")

    data_source = "args" if decl.data_fields else "{}"
    lines.append(f"{INDENT}data, _ = {decl.var_name}.serialize({data_source})")
    if plans:
        lines.append(f"{INDENT}keys = [")
        lines.extend(_account_meta(plan) for plan in plans)
        lines.append(f"{INDENT}]")
        lines.append(f"{INDENT}keys.extend(accounts.{REMAINING_ACCOUNTS_FIELD})")
    else:
        lines.append(f"{INDENT}keys: list[AccountMeta] = []")
    lines.append(f"{INDENT}return Instruction(program_id, data, keys)")
    return "\n".join(lines) + "\n"
