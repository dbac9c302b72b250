"""Tests for the portal entry point: login, routing and sidebar."""

from unittest.mock import MagicMock, patch

import pytest

from banking_client.exceptions import AuthenticationError
from banking_client.session import Session


class Rerun(Exception):
    """Stands in for Streamlit's rerun control flow."""


@pytest.fixture
def manager_session(manager, make_token) -> Session:
    return Session(token=make_token(), user=manager)


class TestRenderPage:
    """Tests for render_page dispatch and guards."""

    def test_dispatches_to_allowed_page(self, client, manager_session):
        from ui.app import render_page

        with patch("ui.app.render_pending_transactions") as mock_page:
            render_page(client, manager_session, "/manager/pending-transactions")

        mock_page.assert_called_once_with(client, manager_session)

    def test_detail_page_receives_parameter(self, client, session):
        from ui.app import render_page

        with patch("ui.app.render_account_details") as mock_page:
            render_page(client, session, "/customer/account/12")

        mock_page.assert_called_once_with(client, session, "12")

    def test_forbidden_page_redirects_to_landing(self, client, session):
        from ui.app import render_page

        with patch("ui.app.go", side_effect=Rerun) as mock_go:
            with patch("ui.app.render_pending_transactions") as mock_page:
                with pytest.raises(Rerun):
                    render_page(client, session, "/customer/pending-transactions")

        mock_go.assert_called_once_with("/customer/dashboard")
        mock_page.assert_not_called()

    def test_other_layout_redirects(self, client, manager_session):
        from ui.app import render_page

        with patch("ui.app.go", side_effect=Rerun) as mock_go:
            with pytest.raises(Rerun):
                render_page(client, manager_session, "/customer/dashboard")

        mock_go.assert_called_once_with("/manager/dashboard")


class TestRenderLogin:
    """Tests for the sign-in page."""

    @patch("ui.app.st.title")
    @patch("ui.app.st.subheader")
    @patch("ui.app.st.form")
    @patch("ui.app.st.text_input")
    @patch("ui.app.st.form_submit_button")
    @patch("ui.app.st.button")
    def test_successful_login_goes_to_dashboard(
        self,
        mock_button,
        mock_submit,
        mock_text_input,
        mock_form,
        mock_subheader,
        mock_title,
        client,
        manager_session,
    ):
        from ui.app import render_login

        mock_text_input.side_effect = ["mgr", "secret"]
        mock_submit.return_value = True
        mock_button.return_value = False
        client.auth.login.return_value = manager_session

        with patch("ui.app.go") as mock_go:
            render_login(client)

        client.auth.login.assert_called_once_with("mgr", "secret")
        mock_go.assert_called_once_with("/manager/dashboard")

    @patch("ui.app.st.title")
    @patch("ui.app.st.subheader")
    @patch("ui.app.st.form")
    @patch("ui.app.st.text_input")
    @patch("ui.app.st.form_submit_button")
    @patch("ui.app.st.button")
    def test_rejected_login_shows_error(
        self,
        mock_button,
        mock_submit,
        mock_text_input,
        mock_form,
        mock_subheader,
        mock_title,
        client,
    ):
        from ui.app import render_login

        mock_text_input.side_effect = ["mgr", "wrong"]
        mock_submit.return_value = True
        mock_button.return_value = False
        error = AuthenticationError("Bad credentials", status_code=401)
        client.auth.login.side_effect = error

        with patch("ui.app.show_error") as mock_show_error, patch("ui.app.go") as mock_go:
            render_login(client)

        mock_show_error.assert_called_once_with(error, "Invalid username or password.")
        mock_go.assert_not_called()

    @patch("ui.app.st.title")
    @patch("ui.app.st.subheader")
    @patch("ui.app.st.form")
    @patch("ui.app.st.text_input")
    @patch("ui.app.st.form_submit_button")
    @patch("ui.app.st.button")
    @patch("ui.app.st.error")
    def test_missing_credentials_send_nothing(
        self,
        mock_error,
        mock_button,
        mock_submit,
        mock_text_input,
        mock_form,
        mock_subheader,
        mock_title,
        client,
    ):
        from ui.app import render_login

        mock_text_input.side_effect = ["mgr", ""]
        mock_submit.return_value = True
        mock_button.return_value = False

        render_login(client)

        mock_error.assert_called_once()
        client.auth.login.assert_not_called()


class TestRenderRegister:
    """Tests for the registration page."""

    @patch("ui.app.st.title")
    @patch("ui.app.st.subheader")
    @patch("ui.app.st.form")
    @patch("ui.app.st.columns")
    @patch("ui.app.st.text_input")
    @patch("ui.app.st.form_submit_button")
    @patch("ui.app.st.button")
    @patch("ui.app.st.error")
    def test_short_password_is_rejected_locally(
        self,
        mock_error,
        mock_button,
        mock_submit,
        mock_text_input,
        mock_columns,
        mock_form,
        mock_subheader,
        mock_title,
        client,
    ):
        from ui.app import render_register

        col1, col2 = MagicMock(), MagicMock()
        col1.text_input.return_value = "Bob"
        col2.text_input.return_value = "Brown"
        mock_columns.return_value = [col1, col2]
        # username, email, phone, address, national id, password
        mock_text_input.side_effect = ["bob", "bob@example.com", "", "", "", "123"]
        mock_submit.return_value = True
        mock_button.return_value = False

        render_register(client)

        assert mock_error.call_count >= 1
        client.auth.register.assert_not_called()


class TestMain:
    """Tests for main() routing between anonymous and signed-in views."""

    def test_anonymous_user_sees_login(self, client):
        from ui.app import main

        with (
            patch("ui.app.get_client", return_value=client),
            patch("ui.app.render_flash"),
            patch("ui.app.get_session", return_value=None),
            patch("ui.app.current_path", return_value="/manager/dashboard"),
            patch("ui.app.navigate") as mock_navigate,
            patch("ui.app.render_login") as mock_login,
        ):
            main()

        mock_navigate.assert_called_once_with("/login")
        mock_login.assert_called_once_with(client)

    def test_signed_in_user_leaves_login_page(self, client, session):
        from ui.app import main

        with (
            patch("ui.app.get_client", return_value=client),
            patch("ui.app.render_flash"),
            patch("ui.app.get_session", return_value=session),
            patch("ui.app.current_path", return_value="/login"),
            patch("ui.app.render_sidebar"),
            patch("ui.app.go", side_effect=Rerun) as mock_go,
        ):
            with pytest.raises(Rerun):
                main()

        mock_go.assert_called_once_with("/customer/dashboard")

    def test_signed_in_user_gets_page(self, client, session):
        from ui.app import main

        with (
            patch("ui.app.get_client", return_value=client),
            patch("ui.app.render_flash"),
            patch("ui.app.get_session", return_value=session),
            patch("ui.app.current_path", return_value="/customer/profile"),
            patch("ui.app.render_sidebar") as mock_sidebar,
            patch("ui.app.render_page") as mock_page,
        ):
            main()

        mock_sidebar.assert_called_once_with(client, session)
        mock_page.assert_called_once_with(client, session, "/customer/profile")
