from playwright.sync_api import TimeoutError as PlaywrightTimeoutError


COMPANY_URL = "https://office.hiworks.com/acme.co.kr"
LOGIN_URL = "https://login.office.hiworks.com/acme.co.kr"
HOME_URL = "https://office.hiworks.com/acme.co.kr/home"
WORK_URL = "https://hr-work.office.hiworks.com/personal/index"

SECRET_INPUT = 'input[type="password"]'
IDENTITY_INPUT = 'input[placeholder="Username"]'
SUBMIT_BUTTON = 'button[type="submit"]'
CHECK_IN_BUTTON = '.division-list button:has-text("출근하기")'
CHECK_OUT_BUTTON = '.division-list button:has-text("퇴근하기")'
STATUS_TAG = ".timer-wrapper .tag"


def status_button(label: str) -> str:
    return f'.list-btns button:has-text("{label}")'


class FakeElement:
    def __init__(self, visible=True, disabled=False, text=None):
        self.visible = visible
        self.disabled = disabled
        self.text = text


class FakeDialog:
    def __init__(self, message):
        self.message = message
        self.accepted = False

    def accept(self):
        self.accepted = True


class FakeLocator:
    def __init__(self, page, selector):
        self.page = page
        self.selector = selector

    def locator(self, child):
        return FakeLocator(self.page, f"{self.selector} {child}")

    def _element(self):
        element = self.page.elements.get(self.selector)
        if element is None or not element.visible:
            raise PlaywrightTimeoutError(f"Timeout waiting for locator('{self.selector}')")
        return element

    def is_visible(self):
        element = self.page.elements.get(self.selector)
        return bool(element and element.visible)

    def wait_for(self, state="visible", timeout=None):
        self.page.actions.append(("wait_for", self.selector, timeout))
        self._element()

    def fill(self, value):
        self._element()
        self.page.actions.append(("fill", self.selector, value))

    def click(self):
        self._element()
        self.page.actions.append(("click", self.selector))
        callback = self.page.on_click.get(self.selector)
        if callback is not None:
            callback(self.page)

    def get_attribute(self, name, timeout=None):
        element = self._element()
        if name == "disabled" and element.disabled:
            return ""
        return None

    def text_content(self, timeout=None):
        return self._element().text


class FakePage:
    def __init__(self, url="about:blank"):
        self.url = url
        self.elements = {}
        self.routes = {}
        self.on_click = {}
        self.listeners = {}
        self.actions = []
        self.visited = []
        self.waits = []

    def goto(self, url):
        self.visited.append(url)
        self.url = self.routes.get(url, url)

    def wait_for_load_state(self, state="load"):
        self.actions.append(("load_state", state))

    def wait_for_timeout(self, timeout):
        self.waits.append(timeout)

    def locator(self, selector):
        return FakeLocator(self, selector)

    def once(self, event, handler):
        self.listeners.setdefault(event, []).append(handler)

    def remove_listener(self, event, handler):
        self.listeners[event].remove(handler)

    def emit(self, event, payload):
        for handler in self.listeners.pop(event, []):
            handler(payload)

    def evaluate(self, expression):
        self.actions.append(("evaluate", expression))

    def bring_to_front(self):
        self.actions.append(("bring_to_front",))

    def clicks(self, selector):
        return [a for a in self.actions if a[0] == "click" and a[1] == selector]

    def fills(self, selector):
        return [a[2] for a in self.actions if a[0] == "fill" and a[1] == selector]


class FakeContext:
    def __init__(self, page):
        self.pages = [page] if page is not None else []
        self.closed = False

    def new_page(self):
        page = FakePage()
        self.pages.append(page)
        return page

    def close(self):
        self.closed = True


class FakeDriver:
    """Stands in for ``sync_playwright``: ``FakeDriver()().start().chromium``."""

    def __init__(self, page=None):
        self.context = FakeContext(page)
        self.launches = []
        self.stopped = 0
        self.chromium = self

    def __call__(self):
        return self

    def start(self):
        return self

    def stop(self):
        self.stopped += 1

    def launch_persistent_context(self, user_data_dir, **kwargs):
        self.launches.append((user_data_dir, kwargs))
        return self.context


class FakeHiworksSite:
    """Wires a FakePage up to behave like the Hiworks login and work pages."""

    def __init__(self, page, *, logged_in=True, remembered_identity=False, password="correct-horse"):
        self.page = page
        self.logged_in = logged_in
        self.password = password
        page.routes[COMPANY_URL] = HOME_URL if logged_in else LOGIN_URL
        page.elements[SECRET_INPUT] = FakeElement(visible=remembered_identity)
        page.elements[IDENTITY_INPUT] = FakeElement(visible=not remembered_identity)
        page.elements[SUBMIT_BUTTON] = FakeElement()
        page.on_click[SUBMIT_BUTTON] = self._submit

        page.elements[CHECK_IN_BUTTON] = FakeElement()
        page.elements[f"{CHECK_IN_BUTTON} .check-time"] = FakeElement(text="")
        page.elements[CHECK_OUT_BUTTON] = FakeElement()
        page.elements[f"{CHECK_OUT_BUTTON} .check-time"] = FakeElement(text="")
        page.elements[STATUS_TAG] = FakeElement(text="업무")
        page.on_click[CHECK_IN_BUTTON] = self._check_in
        page.on_click[CHECK_OUT_BUTTON] = self._check_out
        for label in ("업무", "외출", "회의", "외근"):
            page.elements[status_button(label)] = FakeElement()
            page.on_click[status_button(label)] = self._status_clicker(label)

    def _submit(self, page):
        if page.elements[SECRET_INPUT].visible:
            submitted = page.fills(SECRET_INPUT)
            if submitted and submitted[-1] == self.password:
                self.logged_in = True
                page.routes[COMPANY_URL] = HOME_URL
                page.url = HOME_URL
        else:
            page.elements[IDENTITY_INPUT].visible = False
            page.elements[SECRET_INPUT].visible = True

    def already_checked_in(self, at="09:01"):
        self.page.elements[CHECK_IN_BUTTON].disabled = True
        self.page.elements[f"{CHECK_IN_BUTTON} .check-time"].text = at

    def _check_in(self, page):
        page.elements[CHECK_IN_BUTTON].disabled = True
        page.elements[f"{CHECK_IN_BUTTON} .check-time"].text = "08:58"

    def _check_out(self, page):
        page.emit("dialog", FakeDialog("퇴근하시겠습니까?"))
        page.elements[f"{CHECK_OUT_BUTTON} .check-time"].text = "18:05"

    def _status_clicker(self, label):
        def _click(page):
            for other in ("업무", "외출", "회의", "외근"):
                page.elements[status_button(other)].disabled = other == label
            page.elements[STATUS_TAG].text = label

        return _click

