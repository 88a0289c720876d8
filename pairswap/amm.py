"""Constant product math.

The pool keeps x * y >= k across swaps. All calculations use integer
arithmetic and round in the pool's favor: swap outputs and withdrawals
round down, the reserve the pool keeps after a swap rounds up.
"""

from __future__ import annotations

from pairswap.safe_int import S


class ConstantProduct:
    """Integer math for a two-asset x * y = k pool without fees.

    Swap output:
        k = reserve_in * reserve_out
        new_reserve_out = ceil(k / (reserve_in + amount_in))
        amount_out = reserve_out - new_reserve_out

    Rounding the retained reserve up (rather than the textbook
    reserve_out - floor(k / (reserve_in + amount_in))) is what guarantees
    (reserve_in + amount_in) * new_reserve_out >= k.
    """

    def get_amount_out(self, amount_in: int, reserve_in: int, reserve_out: int) -> int:
        """Output for an exact input.

        Args:
            amount_in: Input amount
            reserve_in: Reserve of the input asset
            reserve_out: Reserve of the output asset

        Returns:
            Output amount, 0 if input or either reserve is 0
        """
        if amount_in <= 0 or reserve_in <= 0 or reserve_out <= 0:
            return 0

        k = S(reserve_in) * S(reserve_out)
        new_reserve_out = k.ceiling_div(S(reserve_in) + S(amount_in))
        return (S(reserve_out) - new_reserve_out).value

    def initial_shares(self, amount_a: int, amount_b: int) -> int:
        """Shares minted by the first deposit: floor(sqrt(a * b))."""
        return (S(amount_a) * S(amount_b)).sqrt().value

    def proportional_shares(
        self,
        amount_a: int,
        amount_b: int,
        reserve_a: int,
        reserve_b: int,
        total_supply: int,
    ) -> int:
        """Shares minted by a later deposit.

        Each side is valued at the current reserve ratio and the smaller
        claim wins, so depositing off-ratio never mints more than the
        scarcer side justifies.
        """
        supply = S(total_supply)
        shares_a = S(amount_a) * supply // S(reserve_a)
        shares_b = S(amount_b) * supply // S(reserve_b)
        return shares_a.min(shares_b).value

    def withdrawal_amounts(
        self,
        share_amount: int,
        reserve_a: int,
        reserve_b: int,
        total_supply: int,
    ) -> tuple[int, int]:
        """Reserves paid out for burning ``share_amount`` shares, rounded down."""
        shares = S(share_amount)
        amount_a = shares * S(reserve_a) // S(total_supply)
        amount_b = shares * S(reserve_b) // S(total_supply)
        return amount_a.value, amount_b.value

    def invariant(self, reserve_a: int, reserve_b: int) -> int:
        """k for the given reserves. Never stored."""
        return (S(reserve_a) * S(reserve_b)).value


# Singleton instance
constant_product = ConstantProduct()


__all__ = ["ConstantProduct", "constant_product"]
