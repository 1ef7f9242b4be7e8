# services/registry.py
from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple

from loguru import logger
from pydantic import BaseModel

from data.items import DEFAULT_SKIN, ShopItem, get_shop_item
from models.player import BattleMode, Currency, HeroClass, Inventory, InventoryItem, Player
from services.battle.engine import finish, new_battle, parse_move, resolve_round, run_auto_battle
from services.battle.models import Battle, BattleProtocol, RoundResult, Rewards
from services.battle.rewards import calc_battle_rewards, parse_difficulty
from services.char_stats import class_name
from services.energy import BASE_ENERGY_MAX, regen_energy, spend_energy
from services.errors import (
    BattleAlreadyFinished,
    BattleNotFound,
    InvalidCurrency,
    InvalidInput,
    InvalidOpponent,
    ListingNotFound,
    NotBattleOwner,
    PlayerNotFound,
    ShopItemNotFound,
)
from services.inventory.service import give_item, make_boost, make_skin
from services.locks import KeyedLocks, Locks, RedisKeyedLocks
from services.market.models import MarketListing
from services.market.service import buy_item, list_item, quick_sell
from services.notifications import LogNotifier, NotificationSink, build_notifier, class_change_message
from services.progress import (
    apply_battle_outcome,
    build_hero,
    change_class,
    grant_rewards,
    try_level_up,
    unlock_class_change,
)
from services.repo import MemoryRepository, RedisRepository, Repository
from services.wallet import debit, parse_currency

Clock = Callable[[], datetime]

# стартовий пакет нового гравця
STARTING_COINS = 100
STARTING_PREMIUM = 0
STARTING_TICKETS = 5
STARTING_ARENA_RATING = 1000

BATTLE_ENERGY_COST = 1
LEADERBOARD_LIMIT = 100


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ─────────────────────────────────────────────
# РЕЗУЛЬТАТИ ОПЕРАЦІЙ
# ─────────────────────────────────────────────
class AutoBattleOutcome(BaseModel):
    battle: Battle
    rewards: Rewards
    player: Player
    leveled_up: bool = False


class BattleStart(BaseModel):
    battle: Battle
    player: Player


class MoveOutcome(BaseModel):
    battle: Battle
    round_result: RoundResult


class BattleSettlement(BaseModel):
    battle: Battle
    rewards: Rewards
    player: Player
    leveled_up: bool = False


class ShopPurchase(BaseModel):
    item: ShopItem
    player: Player


class ListingOutcome(BaseModel):
    listing: MarketListing
    player: Player


class MarketSale(BaseModel):
    listing: MarketListing
    player: Player
    seller_credit: int
    commission: int


class QuickSale(BaseModel):
    item: InventoryItem
    credited: int
    player: Player


class LeaderboardRow(BaseModel):
    rank: int
    username: str
    level: int
    arena_rating: int
    hero_class: HeroClass
    class_name: str


# ─────────────────────────────────────────────
# КЛЮЧІ ЛОКІВ
# ─────────────────────────────────────────────
def _pkey(player_id: str) -> str:
    return f"player:{player_id}"


def _bkey(battle_id: int) -> str:
    return f"battle:{battle_id}"


def _lkey(listing_id: int) -> str:
    return f"listing:{listing_id}"


def _parse_mode(value) -> BattleMode:
    try:
        return BattleMode(value)
    except ValueError:
        raise InvalidInput(f"unknown battle mode: {value!r}")


class PlayerRegistry:
    """
    Єдине джерело правди про гравців, бої і лоти.

    Кожна мутуюча операція:
      1) бере локи всіх записів, які чіпає (KeyedLocks або RedisKeyedLocks, сортований порядок);
      2) читає записи з репозиторію - це вже робочі копії;
      3) ганяє чисту логіку (engine / market / progress) по копіях;
      4) комітить усе одним put_many. Якщо щось кинуло - нічого не записано.
    Сповіщення шлються після коміту і поза локами.
    """

    def __init__(
        self,
        repo: Optional[Repository] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Clock] = None,
        notifier: Optional[NotificationSink] = None,
        locks: Optional[Locks] = None,
    ):
        self.repo = repo if repo is not None else MemoryRepository()
        self.rng = rng if rng is not None else random.Random()
        self.clock = clock if clock is not None else utcnow
        self.notifier = notifier if notifier is not None else LogNotifier()
        self.locks = locks if locks is not None else KeyedLocks()

    # ───────────────────── LOAD / COMMIT ─────────────────────

    def _load_player(self, player_id: str) -> Player:
        data = self.repo.get("player", str(player_id))
        if data is None:
            raise PlayerNotFound(f"player {player_id} not found")
        return Player.model_validate(data)

    def _load_battle(self, battle_id: int) -> Battle:
        data = self.repo.get("battle", str(battle_id))
        if data is None:
            raise BattleNotFound(f"battle {battle_id} not found")
        return Battle.model_validate(data)

    def _load_listing(self, listing_id: int) -> MarketListing:
        data = self.repo.get("listing", str(listing_id))
        if data is None:
            raise ListingNotFound(f"listing {listing_id} not found")
        return MarketListing.model_validate(data)

    def _commit(
        self,
        players: Tuple[Player, ...] = (),
        battles: Tuple[Battle, ...] = (),
        listings: Tuple[MarketListing, ...] = (),
    ) -> None:
        entries = []
        for p in players:
            entries.append(("player", p.id, p.model_dump(mode="json")))
        for b in battles:
            entries.append(("battle", str(b.id), b.model_dump(mode="json")))
        for l in listings:
            entries.append(("listing", str(l.id), l.model_dump(mode="json")))
        self.repo.put_many(entries)

    def _touch(self, player: Player, now: datetime) -> None:
        regen_energy(player, now)
        player.last_active_at = now

    def _item_uid(self) -> str:
        return f"itm{self.repo.next_id('item')}"

    def _notify(self, player_id: str, text: str) -> None:
        try:
            self.notifier.notify(player_id, text)
        except Exception as e:
            logger.warning(f"notify failed for uid={player_id}: {e!r}")

    # ───────────────────── PLAYERS ─────────────────────

    def _new_player(self, player_id: str, username: Optional[str], now: datetime) -> Player:
        player = Player(
            id=player_id,
            username=username or f"Player{player_id}",
            seq=self.repo.next_id("player"),
            currencies={Currency.COINS: STARTING_COINS, Currency.PREMIUM: STARTING_PREMIUM},
            energy=BASE_ENERGY_MAX,
            max_energy=BASE_ENERGY_MAX,
            energy_regen_at=now,
            arena_rating=STARTING_ARENA_RATING,
            hero=build_hero(1, HeroClass.WANDERER, self.rng),
            inventory=Inventory(tickets=STARTING_TICKETS),
            last_active_at=now,
            joined_at=now,
        )
        give_item(player, make_skin(self._item_uid(), DEFAULT_SKIN))
        return player

    def get_player(self, player_id: str) -> Player:
        player_id = str(player_id)
        with self.locks.hold(_pkey(player_id)):
            player = self._load_player(player_id)
            self._touch(player, self.clock())
            self._commit(players=(player,))
            return player

    def get_or_create_player(self, player_id: str, username: Optional[str] = None) -> Player:
        player_id = str(player_id)
        with self.locks.hold(_pkey(player_id)):
            now = self.clock()
            data = self.repo.get("player", player_id)
            if data is None:
                player = self._new_player(player_id, username, now)
                logger.info(f"registry: new player uid={player_id} name={player.username!r}")
            else:
                player = Player.model_validate(data)
                self._touch(player, now)
            self._commit(players=(player,))
            return player

    def create_player_if_absent(
        self,
        player_id: str,
        username: str,
        customize: Callable[[Player], None],
    ) -> bool:
        """Для сидера: створює гравця і дає customize допрацювати його до коміту."""
        player_id = str(player_id)
        with self.locks.hold(_pkey(player_id)):
            if self.repo.get("player", player_id) is not None:
                return False
            player = self._new_player(player_id, username, self.clock())
            customize(player)
            self._commit(players=(player,))
            return True

    def change_class(self, player_id: str, new_class: str) -> Player:
        player_id = str(player_id)
        with self.locks.hold(_pkey(player_id)):
            player = self._load_player(player_id)
            self._touch(player, self.clock())
            change_class(player, new_class, self.rng)
            self._commit(players=(player,))
            return player

    # ───────────────────── BATTLES ─────────────────────

    def _settle(self, battle: Battle, player: Player) -> Tuple[Rewards, bool, bool]:
        """
        Фіксує результат завершеного бою на гравці. Рівно один раз на бій.
        Повертає (rewards, leveled_up, class_change_unlocked).
        """
        if battle.settled:
            raise BattleAlreadyFinished(f"battle {battle.id} is already settled")

        win = battle.result.win
        apply_battle_outcome(player, battle.mode, win)

        rewards = calc_battle_rewards(win, battle.difficulty, battle.player_level)
        grant_rewards(player, rewards)

        leveled_up = try_level_up(player, self.rng)
        unlocked = leveled_up and unlock_class_change(player)

        battle.rewards = rewards
        battle.settled = True

        logger.info(
            f"battle: id={battle.id} uid={player.id} win={win} "
            f"+{rewards.coins}c +{rewards.experience}xp +{rewards.arena_rating}r"
        )
        return rewards, leveled_up, unlocked

    def start_auto_battle(self, player_id: str, difficulty: str, mode: str = "pve") -> AutoBattleOutcome:
        player_id = str(player_id)
        difficulty = parse_difficulty(difficulty)
        mode = _parse_mode(mode)

        with self.locks.hold(_pkey(player_id)):
            now = self.clock()
            player = self._load_player(player_id)
            self._touch(player, now)
            spend_energy(player, BATTLE_ENERGY_COST, now)

            battle = new_battle(
                self.repo.next_id("battle"),
                player.id,
                player.hero,
                player.level,
                BattleProtocol.AUTO,
                mode,
                difficulty,
                now,
            )
            run_auto_battle(battle, self.rng, now)
            rewards, leveled_up, unlocked = self._settle(battle, player)

            self._commit(players=(player,), battles=(battle,))

        if unlocked:
            self._notify(player.id, class_change_message())

        return AutoBattleOutcome(battle=battle, rewards=rewards, player=player, leveled_up=leveled_up)

    def start_interactive_battle(
        self,
        player_id: str,
        opponent_kind: str = "bot",
        difficulty: str = "medium",
    ) -> BattleStart:
        player_id = str(player_id)
        if opponent_kind != "bot":
            raise InvalidOpponent(f"unsupported opponent: {opponent_kind!r}")
        difficulty = parse_difficulty(difficulty)

        with self.locks.hold(_pkey(player_id)):
            now = self.clock()
            player = self._load_player(player_id)
            self._touch(player, now)
            spend_energy(player, BATTLE_ENERGY_COST, now)

            battle = new_battle(
                self.repo.next_id("battle"),
                player.id,
                player.hero,
                player.level,
                BattleProtocol.INTERACTIVE,
                BattleMode.PVP,
                difficulty,
                now,
                opponent_kind=opponent_kind,
            )
            self._commit(players=(player,), battles=(battle,))

        logger.info(f"battle: id={battle.id} uid={player.id} interactive start ({difficulty.value})")
        return BattleStart(battle=battle, player=player)

    def submit_move(self, battle_id: int, move: str) -> MoveOutcome:
        move = parse_move(move)
        with self.locks.hold(_bkey(battle_id)):
            battle = self._load_battle(battle_id)
            rr = resolve_round(battle, move, self.rng, self.clock())
            self._commit(battles=(battle,))
        return MoveOutcome(battle=battle, round_result=rr)

    def finish_battle(self, battle_id: int, player_id: str) -> BattleSettlement:
        """
        Фінал покрокового бою. Активний бій закривається як здача (поразка),
        вже завершений - просто отримує нагороди. Повторний виклик -
        BattleAlreadyFinished.
        """
        player_id = str(player_id)
        owner_id = self._load_battle(battle_id).owner_id  # owner не змінюється
        if owner_id != player_id:
            raise NotBattleOwner(f"battle {battle_id} belongs to another player")

        with self.locks.hold(_bkey(battle_id), _pkey(player_id)):
            now = self.clock()
            battle = self._load_battle(battle_id)
            if battle.settled:
                raise BattleAlreadyFinished(f"battle {battle_id} is already settled")

            player = self._load_player(player_id)
            self._touch(player, now)

            if not battle.is_finished:
                finish(battle, now, forfeit=True)

            rewards, leveled_up, unlocked = self._settle(battle, player)
            self._commit(players=(player,), battles=(battle,))

        if unlocked:
            self._notify(player.id, class_change_message())

        return BattleSettlement(battle=battle, rewards=rewards, player=player, leveled_up=leveled_up)

    def get_battle(self, battle_id: int) -> Battle:
        return self._load_battle(battle_id)

    # ───────────────────── SHOP ─────────────────────

    def purchase_shop_item(self, player_id: str, item_id: str, currency: str = "coins") -> ShopPurchase:
        player_id = str(player_id)
        shop_item = get_shop_item(item_id)
        if shop_item is None:
            raise ShopItemNotFound(f"shop item {item_id!r} not found")

        currency = parse_currency(currency)
        price = shop_item.price.get(currency)
        if price is None:
            raise InvalidCurrency(f"{shop_item.id} is not sold for {currency.value}")

        with self.locks.hold(_pkey(player_id)):
            player = self._load_player(player_id)
            self._touch(player, self.clock())

            debit(player, currency, price)
            if shop_item.type == "ticket":
                player.inventory.tickets += shop_item.quantity
            else:
                for _ in range(shop_item.quantity):
                    give_item(player, make_boost(self._item_uid(), shop_item))

            self._commit(players=(player,))

        logger.info(f"shop: uid={player_id} bought {shop_item.id} for {price} {currency.value}")
        return ShopPurchase(item=shop_item, player=player)

    # ───────────────────── MARKET ─────────────────────

    def list_market_item(
        self,
        player_id: str,
        item_uid: str,
        price: int,
        currency: str = "coins",
    ) -> ListingOutcome:
        player_id = str(player_id)
        with self.locks.hold(_pkey(player_id)):
            now = self.clock()
            seller = self._load_player(player_id)
            self._touch(seller, now)

            listing = list_item(seller, item_uid, price, currency, listing_id=0, now=now)
            # id видаємо лише для лоту, що пройшов перевірки
            listing.id = self.repo.next_id("listing")

            self._commit(players=(seller,), listings=(listing,))

        logger.info(
            f"market: uid={player_id} listed {listing.item.item_id} "
            f"#{listing.id} for {listing.price} {listing.currency.value}"
        )
        return ListingOutcome(listing=listing, player=seller)

    def buy_market_item(self, player_id: str, listing_id: int) -> MarketSale:
        player_id = str(player_id)
        seller_id = self._load_listing(listing_id).seller_id  # продавець не змінюється

        with self.locks.hold(_lkey(listing_id), _pkey(player_id), _pkey(seller_id)):
            now = self.clock()
            listing = self._load_listing(listing_id)
            buyer = self._load_player(player_id)
            seller = buyer if seller_id == player_id else self._load_player(seller_id)
            self._touch(buyer, now)
            if seller is not buyer:
                self._touch(seller, now)

            seller_credit, commission = buy_item(buyer, seller, listing, now)
            self._commit(players=(buyer, seller), listings=(listing,))

        logger.info(
            f"market: uid={player_id} bought #{listing.id} from uid={seller_id} "
            f"for {listing.price} {listing.currency.value} (commission {commission})"
        )
        return MarketSale(listing=listing, player=buyer, seller_credit=seller_credit, commission=commission)

    def quick_sell_item(self, player_id: str, item_uid: str) -> QuickSale:
        player_id = str(player_id)
        with self.locks.hold(_pkey(player_id)):
            owner = self._load_player(player_id)
            self._touch(owner, self.clock())
            item, gain = quick_sell(owner, item_uid)
            self._commit(players=(owner,))

        logger.info(f"market: uid={player_id} quick-sold {item.item_id} ({item.uid}) +{gain}c")
        return QuickSale(item=item, credited=gain, player=owner)

    def get_listing(self, listing_id: int) -> MarketListing:
        return self._load_listing(listing_id)

    def active_listings(self) -> List[MarketListing]:
        listings = [MarketListing.model_validate(d) for d in self.repo.values("listing")]
        return sorted((l for l in listings if l.is_listed), key=lambda l: l.id)

    # ───────────────────── RATINGS ─────────────────────

    def get_leaderboard(self, limit: int = LEADERBOARD_LIMIT) -> List[LeaderboardRow]:
        players = [Player.model_validate(d) for d in self.repo.values("player")]
        players.sort(key=lambda p: (-p.arena_rating, p.seq))

        rows: List[LeaderboardRow] = []
        for rank, p in enumerate(players[: max(0, int(limit))], start=1):
            rows.append(
                LeaderboardRow(
                    rank=rank,
                    username=p.username,
                    level=p.level,
                    arena_rating=p.arena_rating,
                    hero_class=p.hero.hero_class,
                    class_name=class_name(p.hero.hero_class),
                )
            )
        return rows

    def counts(self) -> Dict[str, int]:
        return {
            "players": self.repo.count("player"),
            "battles": self.repo.count("battle"),
            "listings": self.repo.count("listing"),
        }


def build_registry(settings) -> PlayerRegistry:
    if settings.redis_url:
        redis_repo = RedisRepository.from_url(settings.redis_url)
        logger.info("registry: using Redis repository and Redis locks")
        return PlayerRegistry(
            repo=redis_repo,
            notifier=build_notifier(settings.bot_notify_url),
            locks=RedisKeyedLocks(redis_repo.client, prefix=redis_repo.prefix),
        )

    logger.info("registry: using in-memory repository")
    return PlayerRegistry(repo=MemoryRepository(), notifier=build_notifier(settings.bot_notify_url))
