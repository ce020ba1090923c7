from vagas_api.api.app import create_app

app = create_app()
