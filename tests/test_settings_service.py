import threading

from tradedesk.services.settings_service import SettingsService


class TestSettings:

    def test_defaults_created_on_first_read(self, settings):
        s = settings.get()
        assert s.next_sequence == 1
        assert s.quote_prefix == "Q"
        assert settings.repo.get_by_id("settings") is not None

    def test_update(self, settings):
        settings.update(default_tax_rate=0.08, company_name="ReGlaze Co")
        s = SettingsService(settings.repo.filepath.parent).get()
        assert s.default_tax_rate == 0.08
        assert s.company_name == "ReGlaze Co"


class TestSequence:

    def test_monotonic(self, settings):
        assert [settings.next_sequence() for _ in range(3)] == [1, 2, 3]
        assert settings.get().next_sequence == 4

    def test_persisted_across_instances(self, data_dir):
        SettingsService(data_dir).next_sequence()
        assert SettingsService(data_dir).next_sequence() == 2

    def test_zero_counter_is_bumped_to_one(self, settings):
        settings.update(next_sequence=0)
        assert settings.next_sequence() == 1

    def test_threads_never_share_a_sequence(self, data_dir):
        out = []
        lock = threading.Lock()

        def worker():
            svc = SettingsService(data_dir)
            for _ in range(5):
                n = svc.next_sequence()
                with lock:
                    out.append(n)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert sorted(out) == list(range(1, 21))
