import logging
import sys
from typing import Any, Dict, List, Optional, Tuple

from ..bot import DeepBookBot, ensure_success
from ..config import Settings
from ..errors import ConfigurationError, InsufficientFunds
from ..normalize import parse_execution, to_plain
from ._runner import connect, run

logger = logging.getLogger("DeepBook.Deposit")


def planned_deposits(settings: Settings) -> List[Tuple[str, float]]:
    deposits = [(settings.base_coin, settings.deposit_base), (settings.quote_coin, settings.deposit_quote)]
    return [(coin, amount) for coin, amount in deposits if amount > 0]


async def read_balances(bot: DeepBookBot, settings: Settings, coins: List[str]) -> Dict[str, Any]:
    balances: Dict[str, Any] = {}
    for coin in coins:
        try:
            balances[coin] = to_plain(await bot.adapter.check_manager_balance(settings.manager_key, coin))
        except Exception as e:
            logger.warning(f"Could not read manager {coin} balance: {e}")
    return balances


async def main(settings: Settings, bot: Optional[DeepBookBot] = None) -> Dict[str, Any]:
    manager_id = settings.require_manager_id()
    deposits = planned_deposits(settings)
    if not deposits:
        raise ConfigurationError("Nothing to deposit. Set DEPOSIT_BASE or DEPOSIT_QUOTE.", field="DEPOSIT_BASE")

    async with connect(settings, bot) as bot:
        coins = await bot.signer.get_coins(bot.address)
        if not coins:
            raise InsufficientFunds("No SUI coins found for gas. Use the faucet first.")

        txb = bot.new_transaction()
        built_any = False
        executed: List[Dict[str, Any]] = []
        for coin, amount in deposits:
            logger.info(f"Depositing {amount} {coin} into {settings.manager_key}")
            helper = await bot.adapter.build_deposit(txb, settings.manager_key, manager_id, coin, amount)
            if helper.built:
                built_any = True
            else:
                res = ensure_success(parse_execution(helper.exec_result))
                executed.append({"coin": coin, **res.to_dict()})

        outcome: Dict[str, Any] = {"deposits": [{"coin": c, "amount": a} for c, a in deposits], "executed_by_sdk": executed}
        if built_any:
            res = await bot.execute(txb, "deposit tx")
            outcome.update(digest=res.digest, status=res.status)

        outcome["balances"] = await read_balances(bot, settings, [c for c, _ in deposits])
        return outcome


if __name__ == "__main__":
    sys.exit(run(main))
