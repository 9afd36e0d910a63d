"""
Advertisement selection policies.

Both policies trust the order book's ranking: advertisements are assumed to
arrive best price first, so neither policy re-sorts.
"""

from decimal import Decimal
from typing import Sequence

from ..errors import NoAdvertisementFound
from ..models import Advertisement
from ..logging_config import get_logger

logger = get_logger(__name__)


def select_buy_advertisement(ads: Sequence[Advertisement]) -> Advertisement:
    """
    Select the advertisement to buy the asset from.

    Args:
        ads: Buy-side advertisements, best price first.

    Returns:
        The first advertisement.

    Raises:
        NoAdvertisementFound: If ads is empty.
    """
    if not ads:
        raise NoAdvertisementFound("No buy advertisement found")
    return ads[0]


def select_sell_advertisement(
    ads: Sequence[Advertisement],
    target_quantity: Decimal,
) -> Advertisement:
    """
    Select the advertisement to sell target_quantity of the asset to.

    Scans in order and stops at the first advertisement whose limits strictly
    contain target_quantity. A target equal to either limit is not accepted.

    Args:
        ads: Sell-side advertisements, best price first.
        target_quantity: Asset quantity to sell.

    Returns:
        The first eligible advertisement.

    Raises:
        NoAdvertisementFound: If no advertisement accepts target_quantity.
    """
    for position, ad in enumerate(ads):
        if ad.accepts_quantity(target_quantity):
            logger.debug(f"Sell advertisement #{position} accepts {target_quantity}")
            return ad

    raise NoAdvertisementFound(
        f"No sell advertisement accepts a quantity of {target_quantity:.2f}"
    )
