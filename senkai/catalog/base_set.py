"""
Base Set - The built-in card pool and starter decks.

Three colors, twelve cards each: ten main-deck cards (monsters, one spell,
one attachment) plus a plain and an awakened magic card.
"""

from .cards import CardDefinition, CardType, CardColor, Rarity, Deck, Keyword


def _monster(id, name, color, cost, rarity, ap, hp, text="") -> CardDefinition:
    return CardDefinition(
        id=id, name=name, type=CardType.MONSTER, color=color, cost=cost,
        rarity=rarity, ap=ap, hp=hp, text=text,
        image_url=f"./assets/cards/{id}.png",
    )


def _spell(id, name, color, cost, rarity, text) -> CardDefinition:
    return CardDefinition(
        id=id, name=name, type=CardType.SPELL, color=color, cost=cost,
        rarity=rarity, text=text, image_url=f"./assets/cards/{id}.png",
    )


def _attachment(id, name, color, cost, rarity, ap_modifier, hp_modifier, text) -> CardDefinition:
    return CardDefinition(
        id=id, name=name, type=CardType.ATTACHMENT, color=color, cost=cost,
        rarity=rarity, ap_modifier=ap_modifier, hp_modifier=hp_modifier,
        text=text, image_url=f"./assets/cards/{id}.png",
    )


def _magic(id, name, color, rarity, text="") -> CardDefinition:
    return CardDefinition(
        id=id, name=name, type=CardType.MAGIC, color=color, cost=0,
        rarity=rarity, text=text, image_url=f"./assets/cards/{id}.png",
    )


_TIMID_TEXT = "【ひるむ】(プレイヤーに攻撃できない)"


def _awakened_text(color_name: str) -> str:
    return (
        f"《覚醒魔力》ウォールゾーンから{color_name}のカードが自分の捨て札に置かれるとき、"
        "これをウラ向きにすることで、そのカードを捨て札に置く代わりに手札に加えてよい。"
        "そうしたら手札を1枚捨てる。(ウラ向きの魔力は色を持たない)"
    )


# ============================================================================
# Blue
# ============================================================================

BLUE_CARDS = [
    _monster("b001", "ヤマトタケル", CardColor.BLUE, 6, Rarity.SR, 600, 500,
             "青x4 : 攻撃で怪魔を破壊したとき、メインデッキから1枚引いてよい。"),
    _monster("b002", "ヤマ", CardColor.BLUE, 4, Rarity.N, 400, 400),
    _monster("b003", "河童", CardColor.BLUE, 3, Rarity.N, 300, 300),
    _monster("b004", "鳧徯", CardColor.BLUE, 2, Rarity.N, 200, 200),
    _spell("b005", "儚き送り火", CardColor.BLUE, 3, Rarity.R,
           "【大怪魔】を持たない相手の怪魔を1つ選び、手札に戻す。"),
    _attachment("b006", "青鬼の爪", CardColor.BLUE, 1, Rarity.N, 300, 0,
                "これが付いている怪魔のAPを300増やす。"),
    _monster("b007", "大天狗", CardColor.BLUE, 7, Rarity.R, 700, 700,
             "【大怪魔】(中央レーンにしか置けない。相手の左右レーンの怪魔はプレイヤーに攻撃できない)\n"
             "【ダブルクラッシャー】(相手プレイヤーへの攻撃で2枚のウォールを破壊する)"),
    _monster("b008", "ハクタク", CardColor.BLUE, 3, Rarity.N, 300, 200,
             "登場時、メインデッキから1枚引いて手札を1枚捨てる。"),
    _monster("b009", "烏天狗", CardColor.BLUE, 2, Rarity.R, 100, 100,
             "青x3 : 自分のターン終了時、これと、これに付いている付与を手札に戻してよい。"),
    _monster("b010", "アマビエ", CardColor.BLUE, 1, Rarity.N, 200, 200, _TIMID_TEXT),
    _magic("b_magic", "青の魔力", CardColor.BLUE, Rarity.N),
    _magic("b_magic_awakened", "青の覚醒魔力", CardColor.BLUE, Rarity.R, _awakened_text("青")),
]

# ============================================================================
# Green
# ============================================================================

GREEN_CARDS = [
    _monster("g001", "アロサウルス", CardColor.GREEN, 8, Rarity.SR, 700, 700,
             "【大怪魔】\n【ダブルクラッシャー】\n緑x4 : APとHPを200増やす。"),
    _monster("g002", "イグアノドン", CardColor.GREEN, 4, Rarity.N, 400, 400),
    _monster("g003", "プテラノドン", CardColor.GREEN, 3, Rarity.N, 300, 300),
    _monster("g004", "ディッキンソニア", CardColor.GREEN, 2, Rarity.N, 200, 200),
    _spell("g005", "太古の脈動", CardColor.GREEN, 2, Rarity.R,
           "魔力を1つ魔力ゾーンにダウン(ヨコ向き)で出す。"),
    _attachment("g006", "氷塊の籠手", CardColor.GREEN, 1, Rarity.N, 200, 200,
                "【消滅】これが付いている怪魔のAPとHPを200増やす。"),
    _monster("g007", "サウロペルタ", CardColor.GREEN, 5, Rarity.R, 400, 600),
    _monster("g008", "スミロドン", CardColor.GREEN, 4, Rarity.R, 300, 400,
             "左右レーンに登場時、ターン終了時までAPを200増やす。"),
    _monster("g009", "ギガンテウスオオツノジカ", CardColor.GREEN, 3, Rarity.N, 200, 400),
    _monster("g010", "トゥリモンストゥルム", CardColor.GREEN, 1, Rarity.N, 200, 200, _TIMID_TEXT),
    _magic("g_magic", "緑の魔力", CardColor.GREEN, Rarity.N),
    _magic("g_magic_awakened", "緑の覚醒魔力", CardColor.GREEN, Rarity.R, _awakened_text("緑")),
]

# ============================================================================
# Red
# ============================================================================

RED_CARDS = [
    _monster("r001", "ファイアードレイク", CardColor.RED, 7, Rarity.SR, 600, 600,
             "【大怪魔】\n【ダブルクラッシャー】\n赤x4 : 登場時、相手の怪魔を1つ選び、300のダメージを与える。"),
    _monster("r002", "巨人のトロール", CardColor.RED, 5, Rarity.R, 500, 500),
    _monster("r003", "ウェアウルフ", CardColor.RED, 3, Rarity.N, 300, 300),
    _monster("r004", "ゴブリン", CardColor.RED, 2, Rarity.N, 200, 200),
    _spell("r005", "火炎の砲撃", CardColor.RED, 2, Rarity.N,
           "相手の怪魔を1つ選び、300のダメージを与える。"),
    _attachment("r006", "闘竜の腕輪", CardColor.RED, 2, Rarity.R, 300, 300,
                "これが付いている怪魔のAPとHPを300増やす。"),
    _monster("r007", "フェニックス", CardColor.RED, 3, Rarity.R, 300, 200,
             "攻撃で破壊されるとき、手札を1枚捨てることで、これを捨て札に置く代わりに手札に戻してよい。"),
    _monster("r008", "ミノタウロス", CardColor.RED, 4, Rarity.N, 500, 300),
    _monster("r009", "メデューサ", CardColor.RED, 2, Rarity.R, 300, 100),
    _monster("r010", "ピクシー", CardColor.RED, 1, Rarity.N, 200, 200, _TIMID_TEXT),
    _magic("r_magic", "赤の魔力", CardColor.RED, Rarity.N),
    _magic("r_magic_awakened", "赤の覚醒魔力", CardColor.RED, Rarity.R, _awakened_text("赤")),
]

BASE_SET: list[CardDefinition] = BLUE_CARDS + GREEN_CARDS + RED_CARDS

# Abilities with no printed token
EXTRA_KEYWORDS: dict[str, frozenset[Keyword]] = {
    "r007": frozenset({Keyword.PHOENIX}),
}


def _starter(name: str, prefix: str) -> Deck:
    main = []
    for n in range(1, 11):
        main.extend([f"{prefix}{n:03d}"] * 2)
    magic = [f"{prefix}_magic"] * 8 + [f"{prefix}_magic_awakened"] * 2
    return Deck.from_lists(name, main, magic)


STARTER_DECKS: dict[str, Deck] = {
    "blue": _starter("deck_name_blue", "b"),
    "green": _starter("deck_name_green", "g"),
    "red": _starter("deck_name_red", "r"),
}
