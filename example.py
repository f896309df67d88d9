"""Example usage of the Korbit SDK."""

import asyncio
import os

from korbit_sdk import KorbitClient, LogLevel, OrderRejectedError, format_krw


async def main():
    client = KorbitClient(
        client_id=os.environ["KORBIT_CLIENT_ID"],
        client_secret=os.environ["KORBIT_CLIENT_SECRET"],
        username=os.environ["KORBIT_USERNAME"],
        password=os.environ["KORBIT_PASSWORD"],
        log_level=LogLevel.INFO,
    )

    async with client:
        # ====================================================================
        # Public market data
        # ====================================================================

        ticker = await client.get_ticker("btc_krw")
        print(f"BTC/KRW last {format_krw(ticker.last)}, bid {format_krw(ticker.bid)}, ask {format_krw(ticker.ask)}")

        book = await client.get_orderbook("btc_krw")
        print(f"\nTop of book ({len(book.bids)} bids, {len(book.asks)} asks):")
        for bid, ask in zip(book.bids[:5], book.asks[:5]):
            print(f"  {bid.quantity:>12} @ {bid.price:>12,} | {ask.price:<12,} @ {ask.quantity}")

        # ====================================================================
        # Account
        # ====================================================================

        # The SDK never refreshes on its own; do it between operations.
        await client.refresh_if_needed()

        wallets = await client.get_wallets()
        for pair in wallets.pairs():
            balance = await client.get_coin_balance(pair, wallets)
            print(f"{pair.value}: {balance['coins']} {pair.base.value.upper()}, {format_krw(balance['krw'])}")

        # Place a far-from-market bid and cancel it straight away.
        try:
            result = await client.buy("btc_krw", "limit", price=book.bids[-1].price, coin_amount="0.001")
        except OrderRejectedError as error:
            print(f"\nOrder rejected: {error.result.status}")
            return

        print(f"\nPlaced order {result.order_id}")
        for cancel in await client.cancel_open_orders([result.order_id], "btc_krw"):
            print(f"  cancel {cancel.order_id}: {cancel.status}")

        totals = await client.get_trade_totals("btc_krw", limit=100)
        print(f"\nLast 100 fills: bought {format_krw(totals['buys'])}, sold {format_krw(totals['sells'])}")


if __name__ == "__main__":
    asyncio.run(main())
