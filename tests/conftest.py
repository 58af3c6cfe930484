import io

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page invoice PDF with known text content."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "NOTA FISCAL DE SERVICOS ELETRONICA")
    c.drawString(72, 700, "Valor total 1500.00")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with known text on each page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Page one content")
    c.showPage()
    c.drawString(72, 720, "Page two content")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.showPage()
    c.save()
    return buf.getvalue()


NFE_XML = """<?xml version="1.0" encoding="UTF-8"?>
<nfeProc xmlns="http://www.portalfiscal.inf.br/nfe" versao="4.00">
  <NFe>
    <infNFe Id="NFe35240112345678000195550010000012341000012345" versao="4.00">
      <ide>
        <natOp>Venda de mercadoria</natOp>
        <mod>55</mod>
        <dhEmi>2024-01-15T10:30:00-03:00</dhEmi>
      </ide>
      <emit>
        <CNPJ>12345678000195</CNPJ>
        <xNome>Comercio Exemplo LTDA</xNome>
        <enderEmit><xMun>Campinas</xMun><UF>SP</UF></enderEmit>
        <IE>244123456119</IE>
        <CRT>3</CRT>
      </emit>
      <dest>
        <CNPJ>98765432000110</CNPJ>
        <xNome>Distribuidora Carioca SA</xNome>
        <enderDest><xMun>Rio de Janeiro</xMun><UF>RJ</UF></enderDest>
        <IE>86543210</IE>
      </dest>
      <det nItem="1">
        <prod>
          <cProd>PAR-001</cProd>
          <xProd>Parafuso sextavado</xProd>
          <NCM>73181500</NCM>
          <qCom>100.0000</qCom>
          <vUnCom>6.0000000000</vUnCom>
          <vProd>600.00</vProd>
        </prod>
      </det>
      <det nItem="2">
        <prod>
          <cProd>POR-002</cProd>
          <xProd>Porca M8</xProd>
          <NCM>73181600</NCM>
          <qCom>200.0000</qCom>
          <vUnCom>2.0000000000</vUnCom>
          <vProd>400.00</vProd>
        </prod>
      </det>
      <total>
        <ICMSTot>
          <vICMS>200.00</vICMS>
          <vIPI>0.00</vIPI>
          <vPIS>16.50</vPIS>
          <vCOFINS>76.00</vCOFINS>
          <vNF>1000.00</vNF>
        </ICMSTot>
      </total>
    </infNFe>
  </NFe>
  <protNFe>
    <infProt><chNFe>35240112345678000195550010000012341000012345</chNFe></infProt>
  </protNFe>
</nfeProc>
"""


@pytest.fixture()
def nfe_xml() -> str:
    return NFE_XML
