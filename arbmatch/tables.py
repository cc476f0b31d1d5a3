# Ordered rule tables for metadata extraction. Order is significant: the first
# matching rule wins for categories, subcategories and resolution sources, and
# entity lists keep table order.
import re
from typing import Pattern, Tuple

from arbmatch.models import Category

Rule = Tuple[Pattern[str], str]


def _rules(*pairs: Tuple[str, str]) -> Tuple[Rule, ...]:
    return tuple((re.compile(pattern, re.IGNORECASE), label) for pattern, label in pairs)


MONTHS: Tuple[Tuple[str, int], ...] = (
    ("january", 1),
    ("jan", 1),
    ("february", 2),
    ("feb", 2),
    ("march", 3),
    ("mar", 3),
    ("april", 4),
    ("apr", 4),
    ("may", 5),
    ("june", 6),
    ("jun", 6),
    ("july", 7),
    ("jul", 7),
    ("august", 8),
    ("aug", 8),
    ("september", 9),
    ("sep", 9),
    ("sept", 9),
    ("october", 10),
    ("oct", 10),
    ("november", 11),
    ("nov", 11),
    ("december", 12),
    ("dec", 12),
)

# (keywords, month, day) of the quarter's last day
QUARTERS: Tuple[Tuple[Tuple[str, ...], int, int], ...] = (
    (("q1", "first quarter"), 3, 31),
    (("q2", "second quarter"), 6, 30),
    (("q3", "third quarter"), 9, 30),
    (("q4", "fourth quarter", "end of year", "eoy"), 12, 31),
)

RESOLUTION_SOURCES = _rules(
    (r"associated press|ap\b", "AP"),
    (r"official results?", "Official"),
    (r"government data", "Government"),
    (r"fed\b|federal reserve", "Federal Reserve"),
    (r"bls\b|bureau of labor", "BLS"),
    (r"sec\b|securities.*exchange", "SEC"),
    (r"cdc\b|centers.*disease", "CDC"),
)

CATEGORY_RULES: Tuple[Tuple[str, Tuple[Pattern[str], ...]], ...] = tuple(
    (category, tuple(re.compile(pattern, re.IGNORECASE) for pattern in patterns))
    for category, patterns in (
        (
            Category.POLITICS,
            (
                r"trump|biden|election|president|congress|senate|house|vote|poll",
                r"democrat|republican|gop|dnc|rnc|governor|mayor|primary",
                r"impeach|indict|convicted|resign|cabinet|secretary",
                r"regime\s*(change|fall|collapse)|government\s*(fall|collapse|overthrow)",
                r"revolution|coup|civil\s*war|uprising|protest|sanction",
                r"iran|russia|china|ukraine|taiwan|israel|gaza|north\s*korea",
                r"nato|un\b|united\s*nations|eu\b|european\s*union",
                r"war\b|invasion|conflict|treaty|diplomatic|foreign\s*policy",
                r"ayatollah|khamenei|supreme\s*leader|dictator|authoritarian",
            ),
        ),
        (
            Category.ECONOMICS,
            (
                r"fed\b|federal reserve|rate\s*(cut|hike)|interest rate",
                r"inflation|cpi|gdp|recession|unemployment|jobs?\s*report",
                r"stock|s&p|dow|nasdaq|market\s*crash|earnings",
            ),
        ),
        (
            Category.CRYPTO,
            (
                r"bitcoin|btc|ethereum|eth|crypto|blockchain|token",
                r"defi|nft|solana|binance|coinbase|halving",
            ),
        ),
        (
            Category.SPORTS,
            (
                r"super\s*bowl|nfl|nba|mlb|nhl|world\s*series|playoffs",
                r"championship|finals|tournament|olympics|world\s*cup",
                r"laliga|la\s*liga|serie\s*a|bundesliga|ligue\s*1|premier\s*league|eredivisie",
                r"champions\s*league|europa\s*league|conference\s*league|uefa",
                r"real\s*madrid|barcelona|atletico|sevilla|valencia|villarreal|athletic\s*bilbao",
                r"rayo\s*vallecano|real\s*sociedad|real\s*betis|getafe|osasuna|celta|mallorca",
                r"girona|alaves|las\s*palmas|cadiz|almeria|granada|leganes|espanyol",
                r"manchester\s*(united|city)|liverpool|chelsea|arsenal|tottenham|spurs",
                r"newcastle|west\s*ham|aston\s*villa|brighton|crystal\s*palace|everton|fulham",
                r"bayern\s*munich|borussia\s*dortmund|psg|paris\s*saint|juventus|inter\s*milan",
                r"ac\s*milan|napoli|roma|lazio|ajax|porto|benfica",
                r"football|soccer|goal|striker|midfielder|goalkeeper|premier|league\s*match",
                r"win\s+on\s+\d{4}-\d{2}-\d{2}|match\s+\d{4}",
            ),
        ),
        (
            Category.TECH,
            (
                r"ai\b|artificial\s*intelligence|gpt|llm|openai|anthropic",
                r"tesla|spacex|apple|google|microsoft|meta|nvidia",
                r"launch|release|product|iphone|android",
            ),
        ),
        (
            Category.ENTERTAINMENT,
            (
                r"oscar|emmy|grammy|golden\s*globe|movie|film|album",
                r"box\s*office|streaming|netflix|disney|taylor\s*swift",
            ),
        ),
        (
            Category.SCIENCE,
            (
                r"vaccine|virus|covid|pandemic|fda|clinical|drug",
                r"nasa|space|mars|moon|rocket|satellite",
                r"climate|carbon|renewable|fusion|discovery",
            ),
        ),
    )
)

SUBCATEGORY_RULES = _rules(
    (r"super\s*bowl", "super_bowl"),
    (r"presidential|president", "presidential"),
    (r"fed\b|federal\s*reserve", "fed_policy"),
    (r"bitcoin|btc", "bitcoin"),
    (r"ethereum|eth", "ethereum"),
)

PEOPLE = _rules(
    (r"trump|donald\s+trump", "Trump"),
    (r"biden|joe\s+biden", "Biden"),
    (r"harris|kamala", "Harris"),
    (r"desantis", "DeSantis"),
    (r"newsom", "Newsom"),
    (r"elon\s*musk|musk\b", "Musk"),
    (r"powell|jerome\s+powell", "Powell"),
    (r"yellen", "Yellen"),
    (r"xi\s+jinping|\bxi\b", "Xi"),
    (r"putin", "Putin"),
    (r"zelensky", "Zelensky"),
)

ORGANIZATIONS = _rules(
    (r"\bfed\b|federal\s+reserve|fomc", "Fed"),
    (r"\bsec\b", "SEC"),
    (r"\bfda\b", "FDA"),
    (r"\bcdc\b", "CDC"),
    (r"\bnasa\b", "NASA"),
    (r"\bun\b|united\s+nations", "UN"),
    (r"\bnato\b", "NATO"),
    (r"tesla", "Tesla"),
    (r"spacex", "SpaceX"),
    (r"openai", "OpenAI"),
    (r"apple\b", "Apple"),
    (r"google|alphabet", "Google"),
    (r"microsoft", "Microsoft"),
    (r"nvidia", "NVIDIA"),
    (r"meta\b|facebook", "Meta"),
)

LOCATIONS = _rules(
    (r"\bus\b|united\s+states|america", "US"),
    (r"\bchina\b|chinese|beijing", "China"),
    (r"\brussia\b|russian|moscow|kremlin", "Russia"),
    (r"\bukraine\b|ukrainian|kyiv", "Ukraine"),
    (r"\btaiwan\b|taiwanese|taipei", "Taiwan"),
    (r"\bisrael\b|israeli|tel\s+aviv", "Israel"),
    (r"\bgaza\b|palestinian", "Gaza"),
    (r"\biran\b|iranian|tehran", "Iran"),
    (r"\beu\b|european\s+union|brussels", "EU"),
    (r"\buk\b|britain|british|london", "UK"),
)

EVENTS = _rules(
    (r"super\s*bowl", "Super Bowl"),
    (r"world\s*series", "World Series"),
    (r"nba\s*finals", "NBA Finals"),
    (r"stanley\s*cup", "Stanley Cup"),
    (r"world\s*cup", "World Cup"),
    (r"olympics", "Olympics"),
    (r"presidential\s+election", "Presidential Election"),
    (r"midterm", "Midterm Elections"),
    (r"fomc\s+meeting", "FOMC Meeting"),
    (r"oscars?|academy\s+awards?", "Oscars"),
)

_MONTH_NAMES = "january|february|march|april|may|june|july|august|september|october|november|december"

DATE_PHRASES = _rules(
    (r"by\s+(end\s+of\s+)?(20\d{2})", "deadline"),
    (rf"before\s+({_MONTH_NAMES})\s+(20\d{{2}})", "deadline"),
    (r"in\s+(q[1-4])\s+(20\d{2})", "range"),
)

_NUMBER = r"(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?"

# (pattern, default unit). Group 1 is the number, group 2 the optional suffix.
AMOUNT_PATTERNS: Tuple[Tuple[Pattern[str], str], ...] = (
    (re.compile(rf"\$({_NUMBER})\s*(k|m|b|thousand|million|billion)?\b", re.IGNORECASE), "USD"),
    (re.compile(rf"(?<![\w$.,])({_NUMBER})\s*(k|m|b|thousand|million|billion)\b", re.IGNORECASE), "USD"),
    (re.compile(rf"({_NUMBER})\s*(%)", re.IGNORECASE), "%"),
    (re.compile(rf"({_NUMBER})\s*(btc|eth|bitcoin|ethereum)\b", re.IGNORECASE), ""),
)

MULTIPLIERS = {
    "k": 1_000.0,
    "thousand": 1_000.0,
    "m": 1_000_000.0,
    "million": 1_000_000.0,
    "b": 1_000_000_000.0,
    "billion": 1_000_000_000.0,
}

CRYPTO_UNITS = {
    "btc": "BTC",
    "bitcoin": "BTC",
    "eth": "ETH",
    "ethereum": "ETH",
}

KEY_PHRASES: Tuple[str, ...] = (
    "will win",
    "by end of",
    "before",
    "after",
    "reach",
    "exceed",
    "drop below",
    "rise above",
    "be confirmed",
    "be nominated",
)

NEGATION_PATTERNS: Tuple[Pattern[str], ...] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"\bnot\b",
        r"\bwon't\b",
        r"\bwill\s+not\b",
        r"\bfail\s+to\b",
        r"\brefuse\s+to\b",
    )
)

# Symmetric adjacency; sports, entertainment and other only match themselves.
RELATED_CATEGORIES = {
    Category.POLITICS: (Category.ECONOMICS,),
    Category.ECONOMICS: (Category.POLITICS, Category.CRYPTO),
    Category.CRYPTO: (Category.ECONOMICS, Category.TECH),
    Category.TECH: (Category.CRYPTO, Category.SCIENCE),
    Category.SPORTS: (),
    Category.ENTERTAINMENT: (),
    Category.SCIENCE: (Category.TECH,),
    Category.OTHER: (),
}

PLATFORM_RELIABILITY = {
    "polymarket": 90,
    "kalshi": 95,
    "manifold": 70,
    "limitless": 60,
    "metaculus": 80,
}
