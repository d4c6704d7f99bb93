import pytest

import zhcut


@pytest.fixture(scope='session')
def tokenizer(tmp_path_factory):
    """The package-wide Tokenizer, initialized once with its cache in a temp dir."""
    zhcut.dt.tmp_dir = str(tmp_path_factory.mktemp('cache'))
    zhcut.dt.initialize()
    return zhcut.dt


@pytest.fixture(autouse=True)
def clean_session(tokenizer):
    yield
    tokenizer.reset()


SMALL_DICT = u"\n".join([
    u"我 100 r",
    u"来 20 v",
    u"到 30 v",
    u"来到 50 v",
    u"北 5 ns",
    u"京 5 ns",
    u"北京 80 ns",
    u"大学 40 n",
]).encode('utf-8')


@pytest.fixture
def small_dict():
    return SMALL_DICT
