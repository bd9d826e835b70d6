import unittest
from unittest.mock import AsyncMock, MagicMock, patch

from telegram.ext import ConversationHandler

from calculon.bot.commands.auth import login_command, logout_command, signup_command
from calculon.bot.commands.goal import (
    adjust_command, goals_command, new_goal_command, select_command, share_command,
)
from calculon.bot.commands.progress import progress_command
from calculon.bot.handlers import delete_flow, expense_flow
from calculon.bot.handlers.states import ASKING_CONFIRMATION, ASKING_DELETE_CONFIRMATION
from calculon.bot.session import LOGIN_PROMPT, error_text
from calculon.core.errors import FormValidationError, RateLimitError
from calculon.tests.fakes import FakeSupabase, goal_row, make_user


class BotTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.owner = make_user('owner@example.com')
        self.friend = make_user('friend@example.com')
        self.goal = goal_row(self.owner.id, 'Holidays', 100)
        self.client = FakeSupabase(
            tables={
                'goals': [self.goal],
                'profiles': [
                    {'id': self.owner.id, 'email': self.owner.email},
                    {'id': self.friend.id, 'email': self.friend.email},
                ],
            },
            users={self.owner.email: (self.owner, 'secret1')},
        )
        self.context = MagicMock()
        self.context.user_data = {}
        self.context.bot_data = {'supabase_factory': lambda: self.client}
        self.context.args = []

    def make_update(self, text=''):
        update = MagicMock()
        update.message.text = text
        update.message.chat_id = 42
        update.message.reply_text = AsyncMock()
        update.message.reply_photo = AsyncMock()
        return update

    def last_reply(self, update):
        return update.message.reply_text.call_args[0][0]

    async def run_command(self, handler, *args, text=''):
        self.context.args = list(args)
        update = self.make_update(text)
        await handler(update, self.context)
        return update

    async def login(self):
        await self.run_command(login_command, self.owner.email, 'secret1')


class TestErrorText(unittest.TestCase):
    def test_field_errors_are_listed(self):
        text = error_text(FormValidationError({'amount': 'Amount must be a positive number',
                                               'reason': 'Please provide a reason for the adjustment'}))
        self.assertIn('• Amount must be a positive number', text)
        self.assertIn('• Please provide a reason for the adjustment', text)

    def test_other_errors_use_user_message(self):
        self.assertEqual(error_text(RateLimitError()),
                         '❌ Too many expenses added. Please wait a minute.')


class TestAuthCommands(BotTestCase):
    async def test_commands_require_login(self):
        for handler in (goals_command, adjust_command, share_command, progress_command):
            update = await self.run_command(handler)
            update.message.reply_text.assert_awaited_once_with(LOGIN_PROMPT, parse_mode='Markdown')

    async def test_login_usage(self):
        update = await self.run_command(login_command, self.owner.email)
        self.assertIn('/login <email> <password>', self.last_reply(update))

    async def test_login_and_logout(self):
        update = await self.run_command(login_command, self.owner.email, 'secret1')
        self.assertIn('You have 1 goal(s)', self.last_reply(update))
        tracker = self.context.user_data['tracker']
        self.assertTrue(tracker.is_authenticated())

        update = await self.run_command(logout_command)
        self.assertEqual(self.last_reply(update), '👋 Logged out.')
        self.assertFalse(tracker.is_authenticated())

    async def test_bad_credentials(self):
        update = await self.run_command(login_command, self.owner.email, 'nope123')
        self.assertEqual(self.last_reply(update), '❌ Invalid email or password.')

    async def test_signup(self):
        update = await self.run_command(signup_command, 'new@example.com', 'secret9')
        self.assertIn('Account created successfully', self.last_reply(update))


class TestGoalCommands(BotTestCase):
    async def test_goal_list(self):
        await self.login()
        update = await self.run_command(goals_command)
        self.assertIn('1. ▶️ Holidays\n', self.last_reply(update))

    async def test_new_goal_validation(self):
        await self.login()
        update = await self.run_command(new_goal_command, 'abc', '2025-12-31', 'Car')
        self.assertIn('Target amount must be a positive number', self.last_reply(update))

    async def test_new_goal(self):
        await self.login()
        update = await self.run_command(new_goal_command, '5000', '2026-01-31', 'New', 'car')
        self.assertEqual(self.last_reply(update), "🎉 Goal 'New car' created successfully!")
        self.assertIn('New car', [g.name for g in self.context.user_data['tracker'].goals])

    async def test_adjust(self):
        await self.login()
        update = await self.run_command(adjust_command, '200', 'Birthday', 'money')
        self.assertIn("New budget for 'Holidays': 300", self.last_reply(update))
        self.assertEqual(self.client.tables['budget_adjustments'][0]['reason'], 'Birthday money')

    async def test_markdown_characters_in_goal_names_are_escaped(self):
        await self.login()
        await self.run_command(new_goal_command, '300', '2026-01-31', 'road_trip')
        update = await self.run_command(goals_command)
        reply = self.last_reply(update)
        self.assertIn('road\\_trip', reply)
        self.assertNotIn(' road_trip', reply)
        self.assertEqual(update.message.reply_text.call_args.kwargs['parse_mode'], 'Markdown')

        update = await self.run_command(select_command, '1')
        self.assertEqual(self.last_reply(update), '🎯 Selected goal: road\\_trip')

    async def test_adjust_when_goal_vanished(self):
        await self.login()
        # another collaborator removed the goal meanwhile
        self.client.tables['goals'] = []
        update = await self.run_command(adjust_command, '50', 'Gift')
        self.assertEqual(self.last_reply(update), '✅ Budget adjustment added successfully.')

    async def test_share_twice(self):
        await self.login()
        update = await self.run_command(share_command, self.friend.email, 'editor')
        self.assertEqual(self.last_reply(update), "🤝 Collaborator added successfully to 'Holidays'.")

        update = await self.run_command(share_command, self.friend.email)
        self.assertEqual(self.last_reply(update), '❌ This user is already a collaborator')

    async def test_share_unknown_user(self):
        await self.login()
        update = await self.run_command(share_command, 'ghost@example.com')
        self.assertEqual(self.last_reply(update), '❌ User not found')


class TestProgress(BotTestCase):
    async def test_progress_sends_chart(self):
        await self.login()
        update = await self.run_command(progress_command)
        update.message.reply_photo.assert_awaited_once()
        kwargs = update.message.reply_photo.call_args.kwargs
        self.assertEqual(kwargs['photo'].name, 'budget_progress.png')
        self.assertIn('Holidays\nSpent 0 of 100', kwargs['caption'])


class TestExpenseFlow(BotTestCase):
    async def answer(self, handler, text):
        update = self.make_update(text)
        state = await handler(update, self.context)
        return update, state

    async def test_full_conversation_with_warning(self):
        await self.login()
        await self.answer(expense_flow.start_expense, '/expense')
        await self.answer(expense_flow.handle_amount, '95')
        await self.answer(expense_flow.handle_category, 'ING')
        await self.answer(expense_flow.handle_date, '2025-07-10')
        _, state = await self.answer(expense_flow.handle_notes, 'Skip')
        self.assertEqual(state, ASKING_CONFIRMATION)

        update, state = await self.answer(expense_flow.handle_confirmation, 'Yes ✅')
        self.assertEqual(state, ConversationHandler.END)
        replies = [c.args[0] for c in update.message.reply_text.call_args_list]
        self.assertEqual(replies[0], '✅ Expense added successfully')
        self.assertIn("You've used 95.0% of your budget", replies[1])
        self.assertIsNone(self.client.tables['expenses'][0]['notes'])
        self.assertNotIn('pending_expense', self.context.user_data)

    async def test_confirmation_escapes_user_text(self):
        await self.login()
        await self.answer(expense_flow.start_expense, '/expense')
        await self.answer(expense_flow.handle_amount, '12')
        await self.answer(expense_flow.handle_category, 'cash_box')
        await self.answer(expense_flow.handle_date, '2025-07-10')
        update, state = await self.answer(expense_flow.handle_notes, 'pizza *large* `x`')
        self.assertEqual(state, ASKING_CONFIRMATION)

        text = self.last_reply(update)
        self.assertIn('Category: cash\\_box', text)
        self.assertIn('Notes: pizza \\*large\\* \\`x\\`', text)

    async def test_discard(self):
        await self.login()
        await self.answer(expense_flow.start_expense, '/expense')
        await self.answer(expense_flow.handle_amount, '10')
        await self.answer(expense_flow.handle_category, 'Cash')
        await self.answer(expense_flow.handle_date, 'Today')
        await self.answer(expense_flow.handle_notes, 'Lunch')
        update, state = await self.answer(expense_flow.handle_confirmation, 'No ❌')
        self.assertEqual(state, ConversationHandler.END)
        self.assertEqual(self.last_reply(update), 'Expense discarded.')
        self.assertEqual(self.client.tables.get('expenses', []), [])

    async def test_invalid_amount_is_reported_on_confirm(self):
        await self.login()
        await self.answer(expense_flow.start_expense, '/expense')
        await self.answer(expense_flow.handle_amount, 'lots')
        await self.answer(expense_flow.handle_category, 'ING')
        await self.answer(expense_flow.handle_date, '2025-07-10')
        await self.answer(expense_flow.handle_notes, 'Skip')
        update, _ = await self.answer(expense_flow.handle_confirmation, 'yes')
        self.assertIn('Amount must be a positive number', self.last_reply(update))

    @patch('calculon.core.rate_limit.now_ms', return_value=5_000.0)
    async def test_rate_limited_expense(self, _now):
        await self.login()
        self.context.user_data['tracker'].rate_limiter.count = 5
        self.context.user_data['tracker'].rate_limiter.window_start = 1_000.0
        self.context.user_data['pending_expense'] = {
            'goal_id': self.goal['id'], 'goal_name': 'Holidays', 'amount': '10',
            'category': 'ING', 'date': '2025-07-10', 'notes': None,
        }
        update, _ = await self.answer(expense_flow.handle_confirmation, 'yes')
        self.assertEqual(self.last_reply(update), '❌ Too many expenses added. Please wait a minute.')


class TestDeleteFlow(BotTestCase):
    async def test_confirmed_delete(self):
        await self.login()
        update = self.make_update('/delete')
        self.assertEqual(await delete_flow.start_delete_goal(update, self.context),
                         ASKING_DELETE_CONFIRMATION)

        update = self.make_update('Yes ✅')
        self.assertEqual(await delete_flow.handle_delete_confirmation(update, self.context),
                         ConversationHandler.END)
        self.assertEqual(self.last_reply(update), "🗑️ 'Holidays' deleted.")
        self.assertEqual(self.client.tables['goals'], [])
        self.assertIsNone(self.context.user_data['tracker'].selected_goal_id)

    async def test_declined_delete(self):
        await self.login()
        await delete_flow.start_delete_goal(self.make_update('/delete'), self.context)
        update = self.make_update('No ❌')
        await delete_flow.handle_delete_confirmation(update, self.context)
        self.assertEqual(self.last_reply(update), 'Nothing was deleted.')
        self.assertEqual(len(self.client.tables['goals']), 1)


if __name__ == '__main__':
    unittest.main()
