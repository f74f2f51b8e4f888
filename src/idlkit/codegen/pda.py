# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Automatic derivation of program-derived addresses (PDAs) for instruction accounts.

An account whose IDL entry carries a seed formula can be derived by the
generated builder instead of being supplied by the caller, provided every
seed can be resolved from data the builder has:

* constant seeds, whose bytes are computed here and emitted as literals;
* argument seeds with a single-segment path naming an instruction argument
  of a seed-encodable type;
* account seeds with a single-segment path naming another account of the
  same instruction that is neither optional nor itself derived from
  non-constant seeds.

Anything else (nested paths into account data, missing references) leaves the
account to be supplied by the caller.

Seed bytes follow the on-chain conventions: ``u8`` is one byte, wider
integers are little-endian, strings are UTF-8, addresses are their 32 raw
bytes, and byte arrays are used as-is.
"""

from __future__ import annotations

import logging

from solders.pubkey import Pubkey

from idlkit.codegen import primitives
from idlkit.codegen.errors import SeedResolutionError
from idlkit.codegen.naming import python_name
from idlkit.model.entities import AccountSeed, ArgSeed, ConstSeed, Instruction, InstructionAccount, Seed, SeedFormula
from idlkit.model.types import FieldDef, FixedArrayType, PrimitiveType, TypeDescriptor, VectorType, describe

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

MAX_SEED_LENGTH = 32
MAX_SEEDS = 16


def eligibility_problem(account: InstructionAccount, instruction: Instruction) -> str | None:
    """Return why *account* cannot be derived automatically, or ``None`` if it can."""
    formula = account.pda
    if formula is None:
        return "account has no seed formula"
    if account.is_optional:
        return "account is optional"
    if len(formula.seeds) > MAX_SEEDS:
        return f"more than {MAX_SEEDS} seeds"
    seeds: list[Seed] = list(formula.seeds)
    if formula.program_id is not None:
        seeds.append(formula.program_id)
    for seed in seeds:
        problem = _seed_problem(seed, account, instruction)
        if problem is not None:
            return problem
    if isinstance(formula.program_id, ConstSeed) and len(const_seed_bytes(formula.program_id)) != 32:
        return "constant program id is not 32 bytes long"
    return None


def is_eligible(account: InstructionAccount, instruction: Instruction) -> bool:
    """Return True if the builder can derive *account*'s address by itself."""
    problem = eligibility_problem(account, instruction)
    if problem is None:
        return True
    if account.pda is not None:
        logger.info("%s.%s: address must be supplied by the caller: %s", instruction.name, account.name, problem)
    return False


def derived_local(account: InstructionAccount) -> str:
    """Return the builder-local variable holding a derived account's address."""
    return f"{python_name(account.name)}_address"


def render_pda(
    formula: SeedFormula,
    instruction: Instruction,
    derived: set[str],
    *,
    program_id: str = "program_id",
    args: str = "args",
    accounts: str = "accounts",
) -> str:
    """Return the Python expression deriving the address of *formula*.

    Args:
        formula: Seeds of the account.
        instruction: Instruction the account belongs to.
        derived: Names of accounts the builder derives into locals.
        program_id: Expression of the default owning program.
        args: Expression of the instruction arguments object.
        accounts: Expression of the instruction accounts object.

    Raises:
        SeedResolutionError: If a seed references a missing argument or account.
    """
    seeds = [_seed_expression(seed, instruction, derived, args, accounts) for seed in formula.seeds]
    owner = program_id
    if formula.program_id is not None:
        owner = _program_expression(formula.program_id, instruction, derived, args, accounts)
    return f"Pubkey.find_program_address([{', '.join(seeds)}], {owner})[0]"


def constant_address(formula: SeedFormula) -> str | None:
    """Return the base58 address of an all-constant formula, or ``None``.

    The address does not depend on the program the builder is called with
    only when the formula names its owning program as a constant too.
    """
    if not formula.is_constant or not isinstance(formula.program_id, ConstSeed):
        return None
    owner = Pubkey.from_bytes(const_seed_bytes(formula.program_id))
    seeds = [const_seed_bytes(seed) for seed in formula.seeds if isinstance(seed, ConstSeed)]
    address, _ = Pubkey.find_program_address(seeds, owner)
    return str(address)


def const_seed_bytes(seed: ConstSeed) -> bytes:
    """Return the bytes of a constant seed.

    Raises:
        SeedResolutionError: If the value does not fit the declared type.
    """
    descriptor = seed.type
    value = seed.value
    try:
        if isinstance(descriptor, PrimitiveType):
            layout = primitives.integer_layout(descriptor.name)
            if layout is not None:
                width, signed = layout
                return int(value).to_bytes(width, "little", signed=signed)
            if descriptor.name == "string":
                return str(value).encode("utf-8")
            if primitives.is_address(descriptor.name):
                if isinstance(value, str):
                    return bytes(Pubkey.from_string(value))
                return bytes(value)
            if descriptor.name == "bytes":
                return value.encode("utf-8") if isinstance(value, str) else bytes(value)
        if _is_byte_sequence(descriptor):
            return value.encode("utf-8") if isinstance(value, str) else bytes(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise SeedResolutionError(
            f"constant seed {value!r} does not fit type '{describe(descriptor)}': {exc}",
            type_name=describe(descriptor),
        ) from exc
    raise SeedResolutionError(
        f"constant seeds of type '{describe(descriptor)}' are not supported",
        type_name=describe(descriptor),
    )


def seed_bytes_expression(expression: str, descriptor: TypeDescriptor) -> str | None:
    """Return code converting the value of *expression* to seed bytes, or ``None``."""
    if isinstance(descriptor, PrimitiveType):
        layout = primitives.integer_layout(descriptor.name)
        if descriptor.name == "u8":
            return f"bytes([{expression}])"
        if layout is not None:
            width, signed = layout
            if width > 16:
                return None
            suffix = ", signed=True" if signed else ""
            return f'{expression}.to_bytes({width}, "little"{suffix})'
        if descriptor.name == "string":
            return f'{expression}.encode("utf-8")'
        if primitives.is_address(descriptor.name) or descriptor.name == "bytes":
            return f"bytes({expression})"
        return None
    if _is_byte_sequence(descriptor):
        return f"bytes({expression})"
    return None


# ################
# Implementation
# ################


def _is_byte_sequence(descriptor: TypeDescriptor) -> bool:
    return (
        isinstance(descriptor, (FixedArrayType, VectorType))
        and isinstance(descriptor.inner, PrimitiveType)
        and descriptor.inner.name == "u8"
    )


def _find_arg(instruction: Instruction, path: str) -> FieldDef | None:
    wanted = python_name(path)
    return next((arg for arg in instruction.args if python_name(arg.name) == wanted), None)


def _find_account(instruction: Instruction, path: str) -> InstructionAccount | None:
    wanted = python_name(path)
    return next((acc for acc in instruction.accounts if python_name(acc.name) == wanted), None)


def _seed_problem(seed: Seed, account: InstructionAccount, instruction: Instruction) -> str | None:
    if isinstance(seed, ConstSeed):
        try:
            data = const_seed_bytes(seed)
        except SeedResolutionError as exc:
            return str(exc)
        if len(data) > MAX_SEED_LENGTH:
            return f"constant seed is longer than {MAX_SEED_LENGTH} bytes"
        return None
    if "." in seed.path:
        return f"seed path '{seed.path}' has more than one segment"
    if isinstance(seed, ArgSeed):
        arg = _find_arg(instruction, seed.path)
        if arg is None:
            return f"argument '{seed.path}' not found"
        if seed_bytes_expression("value", arg.type) is None:
            return f"argument '{seed.path}' of type '{describe(arg.type)}' cannot be used as a seed"
        return None
    referenced = _find_account(instruction, seed.path)
    if referenced is None:
        return f"account '{seed.path}' not found"
    if referenced is account:
        return "account is derived from its own address"
    if referenced.is_optional:
        return f"account '{seed.path}' is optional"
    if referenced.pda is not None and not referenced.pda.is_constant:
        return f"account '{seed.path}' is itself derived from non-constant seeds"
    return None


def _seed_expression(seed: Seed, instruction: Instruction, derived: set[str], args: str, accounts: str) -> str:
    if isinstance(seed, ConstSeed):
        return repr(const_seed_bytes(seed))
    if isinstance(seed, ArgSeed):
        arg = _find_arg(instruction, seed.path)
        if arg is None:
            raise SeedResolutionError(
                f"{instruction.name}: seed references unknown argument '{seed.path}'",
                entity=instruction.name,
                field=seed.path,
            )
        expression = seed_bytes_expression(f"{args}.{python_name(arg.name)}", arg.type)
        if expression is None:
            raise SeedResolutionError(
                f"{instruction.name}: argument '{seed.path}' of type '{describe(arg.type)}' cannot be used as a seed",
                entity=instruction.name,
                field=seed.path,
                type_name=describe(arg.type),
            )
        return expression
    assert isinstance(seed, AccountSeed)
    return f"bytes({_account_expression(seed, instruction, derived, accounts)})"


def _account_expression(seed: AccountSeed, instruction: Instruction, derived: set[str], accounts: str) -> str:
    referenced = _find_account(instruction, seed.path)
    if referenced is None:
        raise SeedResolutionError(
            f"{instruction.name}: seed references unknown account '{seed.path}'",
            entity=instruction.name,
            field=seed.path,
        )
    if referenced.name in derived:
        return derived_local(referenced)
    return f"{accounts}.{python_name(referenced.name)}"


def _program_expression(seed: Seed, instruction: Instruction, derived: set[str], args: str, accounts: str) -> str:
    if isinstance(seed, ConstSeed):
        return f"Pubkey.from_bytes({const_seed_bytes(seed)!r})"
    if isinstance(seed, ArgSeed):
        arg = _find_arg(instruction, seed.path)
        if arg is None:
            raise SeedResolutionError(
                f"{instruction.name}: program id references unknown argument '{seed.path}'",
                entity=instruction.name,
                field=seed.path,
            )
        return f"{args}.{python_name(arg.name)}"
    assert isinstance(seed, AccountSeed)
    return _account_expression(seed, instruction, derived, accounts)
