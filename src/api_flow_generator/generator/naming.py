"""Action-verb tables used to name generated steps, one per locale.

A summary that already contains an action verb (of any method) is used as-is;
otherwise the method's canonical verb is prepended.
"""

import re
from dataclasses import dataclass, field


@dataclass(frozen=True)
class VerbTable:
    canonical: dict[str, str]
    vocabulary: dict[str, tuple[str, ...]]
    separator: str = ""
    match_words: bool = False  # compare lower-cased words and their inflections instead of substrings
    all_verbs: tuple[str, ...] = field(init=False)

    def __post_init__(self):
        verbs = tuple(v for group in self.vocabulary.values() for v in group)
        object.__setattr__(self, "all_verbs", verbs)

    def verb_for(self, method: str) -> str:
        method = method.upper()
        return self.canonical.get(method, method)

    def has_verb(self, text: str) -> bool:
        if self.match_words:
            words = set(re.findall(r"[a-z]+", text.lower()))
            return any(words & _inflections(verb.lower()) for verb in self.all_verbs)
        return any(verb in text for verb in self.all_verbs)

    def step_name(self, summary: str | None, operation_id: str, method: str) -> str:
        verb = self.verb_for(method)
        if not summary:
            return f"{verb}{self.separator}{operation_id}"
        if self.has_verb(summary):
            return summary
        return f"{verb}{self.separator}{summary}"


def _inflections(verb: str) -> set[str]:
    """Base form plus -s, -ed and -ing forms: create, creates, created, creating."""
    stem = verb[:-1] if verb.endswith("e") else verb
    return {verb, verb + "s", verb + "es", stem + "ed", stem + "ing"}


ZH_TW_VERBS = VerbTable(
    canonical={
        "POST": "建立",
        "GET": "取得",
        "PUT": "更新",
        "PATCH": "修改",
        "DELETE": "刪除",
    },
    vocabulary={
        "POST": ("建立", "新增", "註冊", "登入", "創建"),
        "GET": ("取得", "查詢", "讀取", "列出", "獲取"),
        "PUT": ("更新", "修改", "編輯"),
        "PATCH": ("更新", "修改", "編輯"),
        "DELETE": ("刪除", "移除"),
    },
)

EN_US_VERBS = VerbTable(
    canonical={
        "POST": "Create",
        "GET": "Get",
        "PUT": "Update",
        "PATCH": "Modify",
        "DELETE": "Delete",
    },
    vocabulary={
        "POST": ("create", "add", "register", "login", "sign"),
        "GET": ("get", "list", "fetch", "query", "read", "retrieve", "find", "show"),
        "PUT": ("update", "modify", "edit", "replace"),
        "PATCH": ("update", "modify", "edit", "patch"),
        "DELETE": ("delete", "remove"),
    },
    separator=" ",
    match_words=True,
)

VERB_TABLES = {"zh_TW": ZH_TW_VERBS, "en_US": EN_US_VERBS}
