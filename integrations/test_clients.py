"""
Tests for the upstream and chat platform clients against a mocked requests session.
"""

import unittest
from unittest import mock

import requests

from data_layer import Market
from integrations import (
    ChatDeliveryError,
    ClientConfigurationError,
    FinMindClient,
    LineBotClient,
    LinkButton,
    TelegramBotClient,
    TwseClient,
    UpstreamAPIError,
)
from integrations.finmind_client import FINMIND_API_URL
from integrations.telegram_client import MAX_MESSAGE_LENGTH, truncate_at_line


def json_response(payload, status_code=200):
    response = mock.Mock(spec=requests.Response)
    response.status_code = status_code
    response.reason = "OK" if status_code < 400 else "Error"
    response.text = str(payload)
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(response=response)
    return response


class TestFinMindClient(unittest.TestCase):

    def setUp(self):
        self.session = mock.Mock(spec=requests.Session)
        self.client = FinMindClient(api_token="secret", session=self.session)

    def test_get_stock_info(self):
        self.session.get.return_value = json_response({
            'msg': 'success',
            'status': 200,
            'data': [{'stock_id': '2330', 'stock_name': '台積電'}],
        })

        response = self.client.get_stock_info(Market.TW)

        self.assertTrue(response.ok)
        self.assertEqual(response.data[0]['stock_id'], '2330')
        args, kwargs = self.session.get.call_args
        self.assertEqual(args[0], FINMIND_API_URL)
        self.assertEqual(kwargs['params'], {'dataset': 'TaiwanStockInfo'})
        self.assertEqual(kwargs['headers'], {'Authorization': 'Bearer secret'})

    def test_quota_status_is_returned_not_raised(self):
        self.session.get.return_value = json_response(
            {'msg': 'Requests reach the upper limit', 'status': 402}, status_code=402
        )

        response = self.client.get_stock_info(Market.US)

        self.assertFalse(response.ok)
        self.assertEqual(response.status, 402)
        self.assertEqual(response.data, [])

    def test_network_error_raises(self):
        self.session.get.side_effect = requests.exceptions.ConnectionError("connection reset")
        with self.assertRaises(UpstreamAPIError):
            self.client.get_stock_info(Market.TW)

    def test_invalid_json_raises(self):
        response = json_response(None)
        response.json.side_effect = ValueError("Expecting value")
        self.session.get.return_value = response

        with self.assertRaises(UpstreamAPIError):
            self.client.get_stock_info(Market.TW)

    def test_server_error_raises(self):
        self.session.get.return_value = json_response({}, status_code=503)
        with self.assertRaises(UpstreamAPIError) as ctx:
            self.client.get_dataset("TaiwanStockInfo")
        self.assertEqual(ctx.exception.status_code, 503)

    def test_price_query_parameters(self):
        self.session.get.return_value = json_response({'msg': 'success', 'status': 200, 'data': []})

        self.client.get_taiwan_stock_price("2330", "2024-01-02")

        params = self.session.get.call_args.kwargs['params']
        self.assertEqual(params, {'dataset': 'TaiwanStockPrice', 'data_id': '2330', 'start_date': '2024-01-02'})


class TestTwseClient(unittest.TestCase):

    def setUp(self):
        self.session = mock.Mock(spec=requests.Session)
        self.client = TwseClient(session=self.session)

    def test_daily_market_info(self):
        self.session.get.return_value = json_response({
            'stat': 'OK',
            'data': [
                ["113/01/02", "5,000,000", "300,000,000", "2,000,000", "17,853.76", "-77.05"],
                ["113/01/03", "6,000,000", "310,000,000", "2,100,000", "17,700.00", "-153.76"],
            ],
        })

        items = self.client.get_daily_market_info(1)

        self.assertEqual(len(items), 1)
        self.assertEqual(items[0].date, "113/01/03")
        self.assertEqual(items[0].taiex, "17,700.00")

    def test_top_volume_items(self):
        self.session.get.return_value = json_response({
            'stat': 'OK',
            'data': [
                ["1", "2330", "台積電", "26,059,058", "24,871", "590.00", "593.00", "589.00", "593.00",
                 "<p style= color:red>+</p>", "5.00", "593.00", "100", "594.00", "200"],
                ["x", "bad"],
            ],
        })

        items = self.client.get_top_volume_items()

        self.assertEqual(len(items), 1)
        self.assertEqual((items[0].rank, items[0].symbol, items[0].direction), (1, "2330", "+"))

    def test_non_ok_stat_raises(self):
        self.session.get.return_value = json_response({'stat': '很抱歉，沒有符合條件的資料!'})
        with self.assertRaises(UpstreamAPIError):
            self.client.get_top_volume_items()


class TestTelegramBotClient(unittest.TestCase):

    def setUp(self):
        self.session = mock.Mock(spec=requests.Session)
        self.client = TelegramBotClient("123:abc", session=self.session)

    def test_empty_token(self):
        with self.assertRaises(ClientConfigurationError):
            TelegramBotClient("")

    def test_connect_validates_token(self):
        self.session.post.return_value = json_response({'ok': True, 'result': {'username': 'stock_bot'}})

        client = TelegramBotClient.connect("123:abc", session=self.session)

        self.assertEqual(client.username, "stock_bot")
        self.assertTrue(self.session.post.call_args.args[0].endswith("/bot123:abc/getMe"))

    def test_connect_rejected_token(self):
        self.session.post.return_value = json_response(
            {'ok': False, 'error_code': 401, 'description': 'Unauthorized'}, status_code=401
        )
        with self.assertRaises(UpstreamAPIError):
            TelegramBotClient.connect("123:abc", session=self.session)

    def test_send_message_with_keyboard(self):
        self.session.post.return_value = json_response({'ok': True, 'result': {}})

        self.client.send_message_with_keyboard(42, "news", [[LinkButton("Read", "https://news.example/1")]])

        payload = self.session.post.call_args.kwargs['json']
        self.assertEqual(payload['chat_id'], 42)
        self.assertEqual(payload['reply_markup'], {
            'inline_keyboard': [[{'text': 'Read', 'url': 'https://news.example/1'}]],
        })

    def test_send_without_keyboard(self):
        self.session.post.return_value = json_response({'ok': True, 'result': {}})

        self.client.send_message_with_keyboard(42, "price", None)

        self.assertNotIn('reply_markup', self.session.post.call_args.kwargs['json'])

    def test_long_message_cut_on_line_boundary(self):
        self.session.post.return_value = json_response({'ok': True, 'result': {}})
        line = "<b>2330</b> 台積電 593.00\n"
        text = line * (MAX_MESSAGE_LENGTH // len(line) + 10)

        self.client.send_message(42, text)

        sent = self.session.post.call_args.kwargs['json']['text']
        self.assertLessEqual(len(sent), MAX_MESSAGE_LENGTH)
        self.assertTrue(sent.endswith("593.00"))
        self.assertEqual(sent.count("<b>"), sent.count("</b>"))

    def test_truncate_without_newline(self):
        self.assertEqual(truncate_at_line("abcdef", 4), "abcd")
        self.assertEqual(truncate_at_line("ab\ncdef", 4), "ab")
        self.assertEqual(truncate_at_line("short", 10), "short")

    def test_send_failure_raises_delivery_error(self):
        self.session.post.return_value = json_response(
            {'ok': False, 'description': 'Forbidden: bot was blocked by the user'}, status_code=403
        )

        with self.assertRaises(ChatDeliveryError) as ctx:
            self.client.send_message(42, "hi")
        self.assertEqual(ctx.exception.recipient, 42)


class TestLineBotClient(unittest.TestCase):

    def setUp(self):
        self.session = mock.Mock(spec=requests.Session)
        self.client = LineBotClient("secret", "access-token", session=self.session)

    def test_missing_credentials(self):
        with self.assertRaises(ClientConfigurationError):
            LineBotClient("secret", "")

    def test_push_message(self):
        self.session.post.return_value = json_response({})

        self.client.push_message("U1234", "hello")

        kwargs = self.session.post.call_args.kwargs
        self.assertEqual(kwargs['json'], {'to': 'U1234', 'messages': [{'type': 'text', 'text': 'hello'}]})
        self.assertEqual(kwargs['headers'], {'Authorization': 'Bearer access-token'})

    def test_push_failure(self):
        self.session.post.return_value = json_response({'message': 'Invalid reply token'}, status_code=400)
        with self.assertRaises(ChatDeliveryError):
            self.client.push_message("U1234", "hello")


if __name__ == "__main__":
    unittest.main(verbosity=2)
