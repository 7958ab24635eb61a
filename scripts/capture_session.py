import argparse

from hiworks_commute.core.config import get_settings
from hiworks_commute.core.logging import setup_logging
from hiworks_commute.services.browser_session import BrowserSession
from hiworks_commute.services.credential_store import CredentialStore
from hiworks_commute.services.login_flow import is_authenticated_url


def parse_args() -> str | None:
    parser = argparse.ArgumentParser(description="Log in to Hiworks by hand and keep the session in the worker profile")
    parser.add_argument(
        "--url",
        help="Page to open (defaults to the stored company URL)",
    )
    args = parser.parse_args()
    return args.url


def main() -> None:
    setup_logging()
    settings = get_settings().model_copy(update={"browser_headless": False})
    target = parse_args() or CredentialStore(settings.config_file).get("company_url")
    if not target:
        raise SystemExit("No company URL stored. Pass --url or run setCompanyUrl first.")

    session = BrowserSession(settings)
    try:
        session.goto(target)
        session.surface_for_manual_login()
        print("Browser opened with the worker profile. Complete login and then press Enter...")
        input("Press Enter when the Hiworks main page is visible")

        if is_authenticated_url(session.current_url(), settings):
            print(f"Session saved to {settings.browser_data_dir}")
        else:
            print(f"Still not logged in (current page: {session.current_url()}); try again.")
    finally:
        session.close()


if __name__ == "__main__":
    main()
