"""
Unit Tests for Token URI helpers
"""

import base64
import json
import pytest

from utils.token_uri import decode_svg_image, is_json_data_uri, parse_token_uri

SVG = '<svg xmlns="http://www.w3.org/2000/svg" height="10" width="10"/>'


def svg_image_uri(svg=SVG):
    return "data:image/svg+xml;base64," + base64.b64encode(svg.encode()).decode()


def json_uri(metadata):
    return "data:application/json;base64," + base64.b64encode(json.dumps(metadata).encode()).decode()


class TestParseTokenUri:
    """Test token URI validation"""
    
    def test_base64_json_metadata(self):
        """Test on-chain metadata is decoded"""
        metadata = parse_token_uri(json_uri({'name': 'SVG NFT', 'image': svg_image_uri()}))
        
        assert metadata['name'] == 'SVG NFT'
        assert decode_svg_image(metadata['image']) == SVG
    
    def test_plain_json_data_uri(self):
        """Test percent-encoded JSON data URI"""
        assert parse_token_uri('data:application/json,%7B%22name%22%3A%22x%22%7D') == {'name': 'x'}
    
    def test_storage_uris(self):
        """Test IPFS and Arweave URIs are accepted without decoding"""
        assert parse_token_uri('ipfs://QmYwAPJzv5CZsnA625s3Xf2nemtYgPpHdWEz79ojWnPbdG') is None
        assert parse_token_uri('ar://bNbA3TEQVL60xlgCcqdz4ZPHFZ711cZ3hmkpGttDt_U') is None
    
    def test_is_json_data_uri(self):
        """Test only JSON data URIs are selected for decoding"""
        assert is_json_data_uri(json_uri({'name': 'x'}))
        assert is_json_data_uri('data:application/json,%7B%7D')
        assert not is_json_data_uri('ipfs://Qm')
        assert not is_json_data_uri(svg_image_uri())
    
    def test_http_uri(self):
        """Test off-chain metadata URLs are accepted"""
        assert parse_token_uri('https://example.com/token/0.json') is None
        assert parse_token_uri('http://localhost:8080/0') is None
    
    def test_other_data_uri(self):
        """Test non-JSON data URIs are valid but not decoded"""
        assert parse_token_uri(svg_image_uri()) is None
    
    @pytest.mark.parametrize('uri', [
        '',
        'ipfs',
        'ftp://example.com/0',
        'ipfs://',
        'https://',
        'data:application/json;base64,not base64!',
        'data:application/json;base64,' + base64.b64encode(b'{broken').decode(),
        'data:text/plain',
    ])
    def test_invalid_uris(self, uri):
        """Test empty or malformed URIs raise ValueError"""
        with pytest.raises(ValueError):
            parse_token_uri(uri)
    
    def test_decode_svg_requires_svg_uri(self):
        """Test image decoding rejects other payloads"""
        with pytest.raises(ValueError):
            decode_svg_image('https://example.com/image.svg')
