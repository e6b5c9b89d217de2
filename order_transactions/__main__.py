from order_transactions.main import run

run()
