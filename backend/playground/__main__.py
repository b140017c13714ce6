from playground.main import serve

serve()
