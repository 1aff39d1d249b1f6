"""
Tool Registry and Executor.

Defines the seven tools the conversational layer can call and executes a
ToolCall by name against the AssistantEngine. Every call produces a
ToolResult carrying one display string; nothing here raises to the caller.
"""

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from ..types.tools import ToolCall, ToolDefinition, ToolParameter, ToolParameterType, ToolResult
from .chains import ACCOUNT_TYPES, CUSTODY_BLOCKCHAINS, supported_chains
from .engine import AssistantEngine
from .session import SessionContext


class ToolArgumentError(ValueError):
    """Tool arguments did not match the tool's parameters."""


@dataclass
class RegisteredTool:
    """A tool registered in the registry with its definition and handler."""
    definition: ToolDefinition
    handler: Callable[..., Any]


class ToolRegistry:
    """
    Registry of the tools the conversational layer can call.

    Each tool has a definition (name, description, parameters) and an engine
    method that handles it.
    """

    def __init__(self, engine: AssistantEngine, logger: Optional[logging.Logger] = None):
        self.engine = engine
        self._tools: Dict[str, RegisteredTool] = {}
        self.logger = logger or logging.getLogger(__name__)
        self._register_default_tools()

    def register(self, definition: ToolDefinition, handler: Callable[..., Any]) -> None:
        """Register a tool with its definition and handler."""
        self._tools[definition.name] = RegisteredTool(definition=definition, handler=handler)

    def get_definitions(self) -> List[ToolDefinition]:
        """Get all tool definitions for passing to the model."""
        return [tool.definition for tool in self._tools.values()]

    def get_tool(self, name: str) -> Optional[RegisteredTool]:
        return self._tools.get(name)

    def has_tool(self, name: str) -> bool:
        return name in self._tools

    def to_anthropic_format(self) -> List[Dict[str, Any]]:
        return [definition.to_anthropic_format() for definition in self.get_definitions()]

    def to_openai_format(self) -> List[Dict[str, Any]]:
        return [definition.to_openai_format() for definition in self.get_definitions()]

    def _register_default_tools(self) -> None:
        chain_param = ToolParameter(
            name="chain",
            type=ToolParameterType.STRING,
            description="The chain to query",
            required=True,
            enum=supported_chains(),
        )
        identifier_param = ToolParameter(
            name="address_or_name",
            type=ToolParameterType.STRING,
            description="A 0x wallet address or a human-readable name such as vitalik or vitalik.eth",
            required=True,
        )
        custody_param = ToolParameter(
            name="blockchain",
            type=ToolParameterType.STRING,
            description="The custody blockchain",
            required=True,
            enum=list(CUSTODY_BLOCKCHAINS),
        )

        self.register(
            ToolDefinition(
                name="confirm_identifier",
                description=(
                    "Read a wallet name or address back to the user and ask whether it is spelled correctly. "
                    "Call this before any balance or transaction lookup."
                ),
                parameters=[
                    ToolParameter(
                        name="name",
                        type=ToolParameterType.STRING,
                        description="The name or address as the user said it",
                    ),
                ],
            ),
            self.engine.confirm_identifier,
        )

        self.register(
            ToolDefinition(
                name="spell_identifier",
                description=(
                    "Spell the current name letter by letter when the user says the spelling is wrong, "
                    "then ask them to confirm again."
                ),
                parameters=[
                    ToolParameter(
                        name="current_attempt",
                        type=ToolParameterType.STRING,
                        description="The current best guess at the name",
                    ),
                ],
            ),
            self.engine.spell_identifier,
        )

        self.register(
            ToolDefinition(
                name="get_wallet_balance",
                description=(
                    "Get the token balances of a wallet on a chain. "
                    "Only call this once the user has confirmed the name or address."
                ),
                parameters=[identifier_param, chain_param],
            ),
            self.engine.get_wallet_balance,
        )

        self.register(
            ToolDefinition(
                name="get_transaction_history",
                description=(
                    "Get the most recent transactions of a wallet on a chain. "
                    "Only call this once the user has confirmed the name or address."
                ),
                parameters=[
                    identifier_param,
                    chain_param,
                    ToolParameter(
                        name="limit",
                        type=ToolParameterType.INTEGER,
                        description="How many transactions to return (at most 100)",
                        required=False,
                        default=10,
                    ),
                ],
            ),
            self.engine.get_transaction_history,
        )

        self.register(
            ToolDefinition(
                name="get_token_price",
                description="Look up a token by symbol or name and return its current USD price.",
                parameters=[
                    ToolParameter(
                        name="query",
                        type=ToolParameterType.STRING,
                        description="Token symbol or name, e.g. USDC",
                    ),
                    chain_param.model_copy(update={"required": False, "default": "ethereum"}),
                ],
            ),
            self.engine.get_token_price,
        )

        self.register(
            ToolDefinition(
                name="create_wallet",
                description="Create a new custodial wallet on a test network.",
                parameters=[
                    custody_param,
                    ToolParameter(
                        name="account_type",
                        type=ToolParameterType.STRING,
                        description="SCA for a smart contract account, EOA for an externally owned account",
                        enum=list(ACCOUNT_TYPES),
                    ),
                ],
            ),
            self.engine.create_wallet,
        )

        self.register(
            ToolDefinition(
                name="fund_wallet",
                description="Request test tokens from the faucet for a wallet address.",
                parameters=[
                    ToolParameter(
                        name="address",
                        type=ToolParameterType.STRING,
                        description="The wallet address to fund",
                    ),
                    custody_param,
                ],
            ),
            self.engine.fund_wallet,
        )

    def bind_arguments(self, definition: ToolDefinition, arguments: Dict[str, Any]) -> Dict[str, Any]:
        """
        Check arguments against a tool's parameters.

        Raises:
            ToolArgumentError: Missing, unexpected or wrongly typed arguments.
        """
        known = {param.name: param for param in definition.parameters}
        unexpected = sorted(set(arguments) - set(known))
        if unexpected:
            raise ToolArgumentError(f"unexpected arguments: {', '.join(unexpected)}")

        bound: Dict[str, Any] = {}
        for name, param in known.items():
            if name not in arguments or arguments[name] is None:
                if param.required:
                    raise ToolArgumentError(f"missing required argument: {name}")
                continue
            bound[name] = _coerce(param, arguments[name])
        return bound

    async def execute(self, session: SessionContext, tool_call: ToolCall) -> ToolResult:
        """Execute a single tool call and return the result."""
        tool = self.get_tool(tool_call.name)
        if not tool:
            return ToolResult(tool_call_id=tool_call.id, error=f"Unknown tool: {tool_call.name}")

        try:
            kwargs = self.bind_arguments(tool.definition, tool_call.arguments)
        except ToolArgumentError as e:
            self.logger.info("bad arguments for %s: %s", tool_call.name, e)
            return ToolResult(tool_call_id=tool_call.id, error=f"Invalid arguments for {tool_call.name}: {e}")

        reply = tool.handler(session, **kwargs)
        if inspect.isawaitable(reply):
            reply = await reply
        return ToolResult(tool_call_id=tool_call.id, result=reply)


def _coerce(param: ToolParameter, value: Any) -> Any:
    if param.type == ToolParameterType.INTEGER:
        if isinstance(value, bool):
            raise ToolArgumentError(f"{param.name} must be an integer")
        if isinstance(value, int):
            return value
        if isinstance(value, str) and value.strip().lstrip("-").isdigit():
            return int(value.strip())
        raise ToolArgumentError(f"{param.name} must be an integer")

    if param.type == ToolParameterType.STRING:
        if not isinstance(value, str):
            raise ToolArgumentError(f"{param.name} must be a string")
        return value

    return value


_registry: Optional[ToolRegistry] = None


def get_tool_registry() -> ToolRegistry:
    """Get or create the process-wide tool registry."""
    global _registry
    if _registry is None:
        from .engine import get_engine

        _registry = ToolRegistry(get_engine())
    return _registry
