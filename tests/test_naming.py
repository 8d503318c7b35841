from api_flow_generator.generator.naming import EN_US_VERBS, ZH_TW_VERBS


class TestZhTwVerbs:
    def test_summary_with_own_verb_used_verbatim(self):
        assert ZH_TW_VERBS.step_name("建立使用者", "createUser", "POST") == "建立使用者"

    def test_summary_with_other_methods_verb_used_verbatim(self):
        # a POST named with a read verb must not become "建立查詢..."
        assert ZH_TW_VERBS.step_name("查詢報表", "searchReports", "POST") == "查詢報表"

    def test_verb_anywhere_in_summary_counts(self):
        assert ZH_TW_VERBS.step_name("管理員刪除使用者", "adminDelete", "DELETE") == "管理員刪除使用者"

    def test_summary_without_verb_gets_canonical_prefix(self):
        assert ZH_TW_VERBS.step_name("使用者", "createUser", "POST") == "建立使用者"
        assert ZH_TW_VERBS.step_name("使用者", "deleteUser", "delete") == "刪除使用者"

    def test_missing_summary_uses_operation_id(self):
        assert ZH_TW_VERBS.step_name(None, "createUser", "POST") == "建立createUser"
        assert ZH_TW_VERBS.step_name("", "getUser", "GET") == "取得getUser"


class TestEnUsVerbs:
    def test_verb_detection_is_word_based(self):
        assert EN_US_VERBS.step_name("Create a user", "createUser", "POST") == "Create a user"
        assert EN_US_VERBS.step_name("Target settings", "getTarget", "GET") == "Get Target settings"

    def test_operation_id_fallback(self):
        assert EN_US_VERBS.step_name(None, "deleteUser", "DELETE") == "Delete deleteUser"

    def test_unknown_method_uses_method_name(self):
        assert EN_US_VERBS.verb_for("options") == "OPTIONS"

    def test_inflected_verbs_count(self):
        assert EN_US_VERBS.step_name("Creates a user", "createUser", "POST") == "Creates a user"
        assert EN_US_VERBS.step_name("Updated profile", "updateUser", "PUT") == "Updated profile"
        assert EN_US_VERBS.step_name("Deleting a session", "logout", "DELETE") == "Deleting a session"

    def test_verb_prefix_of_another_word_does_not_count(self):
        assert EN_US_VERBS.step_name("Address book", "createContact", "POST") == "Create Address book"
