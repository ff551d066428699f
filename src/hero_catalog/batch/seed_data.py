"""外部カタログに接続せずに投入できる静的ヒーローデータ.

外部カタログと同じ形式(ケバブケースのフィールド名)で保持する。
"""

from typing import Any

STATIC_HEROES: list[dict[str, Any]] = [
    {
        "id": "70",
        "name": "Batman",
        "powerstats": {
            "intelligence": "100",
            "strength": "26",
            "speed": "27",
            "durability": "50",
            "power": "47",
            "combat": "100",
        },
        "biography": {
            "full-name": "Bruce Wayne",
            "alter-egos": "No alter egos found.",
            "aliases": ["Insider", "Matches Malone"],
            "place-of-birth": "Crest Hill, Bristol Township; Gotham County",
            "first-appearance": "Detective Comics #27",
            "publisher": "DC Comics",
            "alignment": "good",
        },
        "appearance": {
            "gender": "Male",
            "race": "Human",
            "height": ["6'2", "188 cm"],
            "weight": ["210 lb", "95 kg"],
            "eye-color": "blue",
            "hair-color": "black",
        },
        "work": {
            "occupation": "Businessman",
            "base": "Batcave, Stately Wayne Manor, Gotham City",
        },
        "connections": {
            "group-affiliation": "Batman Family, Justice League, Wayne Enterprises",
            "relatives": "Thomas Wayne (father, deceased), Martha Wayne (mother, deceased)",
        },
        "image": {"url": "https://www.superherodb.com/pictures2/portraits/10/100/639.jpg"},
    },
    {
        "id": "332",
        "name": "Iron Man",
        "powerstats": {
            "intelligence": "100",
            "strength": "85",
            "speed": "58",
            "durability": "85",
            "power": "100",
            "combat": "64",
        },
        "biography": {
            "full-name": "Tony Stark",
            "alter-egos": "No alter egos found.",
            "aliases": ["Iron Knight", "Hogan Potts", "Spare Parts Man"],
            "place-of-birth": "Long Island, New York",
            "first-appearance": "Tales of Suspence #39 (March, 1963)",
            "publisher": "Marvel Comics",
            "alignment": "good",
        },
        "appearance": {
            "gender": "Male",
            "race": "Human",
            "height": ["6'6", "198 cm"],
            "weight": ["425 lb", "191 kg"],
            "eye-color": "Blue",
            "hair-color": "Black",
        },
        "work": {
            "occupation": "Inventor, Industrialist; former United States Secretary of Defense",
            "base": "Seattle, Washington",
        },
        "connections": {
            "group-affiliation": "Avengers, Illuminati, Stark Resilient",
            "relatives": "Howard Anthony Stark (father, deceased), Maria Stark (mother, deceased)",
        },
        "image": {"url": "https://www.superherodb.com/pictures2/portraits/10/100/85.jpg"},
    },
    {
        "id": "644",
        "name": "Superman",
        "powerstats": {
            "intelligence": "94",
            "strength": "100",
            "speed": "100",
            "durability": "100",
            "power": "100",
            "combat": "85",
        },
        "biography": {
            "full-name": "Clark Kent",
            "alter-egos": "Superman Prime One-Million",
            "aliases": ["Clark Joseph Kent", "The Man of Steel", "the Man of Tomorrow"],
            "place-of-birth": "Krypton",
            "first-appearance": "ACTION COMICS #1",
            "publisher": "Superman Prime One-Million",
            "alignment": "good",
        },
        "appearance": {
            "gender": "Male",
            "race": "Kryptonian",
            "height": ["6'3", "191 cm"],
            "weight": ["225 lb", "101 kg"],
            "eye-color": "Blue",
            "hair-color": "Black",
        },
        "work": {
            "occupation": "Reporter for the Daily Planet and novelist",
            "base": "Metropolis",
        },
        "connections": {
            "group-affiliation": "Justice League of America, The Legion of Super-Heroes",
            "relatives": "Lois Lane (wife), Jor-El (father, deceased), Lara (mother, deceased)",
        },
        "image": {"url": "https://www.superherodb.com/pictures2/portraits/10/100/791.jpg"},
    },
]
